class CONST:
    # Units per lot, largest first. Position sizing relies on this order.
    LOT_UNITS = {
        "standard": 100000,
        "mini": 10000,
        "micro": 1000,
        "nano": 100,
    }
    STANDARD_LOT_UNITS = 100000
    DEFAULT_LOT_TYPE = "micro"

    MONEY_PLACES = 2
    PIP_PLACES = 1
    PERCENT_PLACES = 2

    UNKNOWN = "Unknown"
    ALL_ACCOUNTS = "All Accounts"
    NO_ACCOUNT = "Default"

    DATE_FORMAT = "%Y-%m-%d"
    MONTH_FORMAT = "%Y-%m"
    DATE_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

    PERIOD_DAYS = {
        "7d": 7,
        "30d": 30,
        "1m": 30,
        "90d": 90,
        "3m": 90,
        "1y": 365,
        "365d": 365,
    }
    DEFAULT_PERIOD_DAYS = 30
