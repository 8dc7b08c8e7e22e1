"""Pure coaching logic. No I/O beyond loading bundled YAML."""
