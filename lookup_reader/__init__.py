"""Lookup reader core: chapter segmentation, pagination and reading positions."""
