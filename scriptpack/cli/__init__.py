"""CLI module for scriptpack."""
