RULESET_VERSION = "2024.11-ocr-qa"
