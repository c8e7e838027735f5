class DEFAULT:
    account_size = 10000.0
    default_risk_percent = 1.0
    default_lot_type = "micro"
    import_lot_type = "standard"
    default_period = "30d"
    timeline_interval = "daily"
    symbol_limit = 10
    extra_table_path = ""
    log_level = "INFO"
    strategy_tags = []
    setup_tags = []
