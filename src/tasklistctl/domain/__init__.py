"""Pure domain rules: no database access, no I/O."""
