"""Shared test helpers: fake relay transport and canonical test keys."""
