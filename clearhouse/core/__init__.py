"""Auction ledgers, clearing engine and persistence."""
