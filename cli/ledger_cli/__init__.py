"""Command-line front end for Schema Ledger."""
