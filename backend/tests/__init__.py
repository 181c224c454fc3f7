"""
Test Suite

Unit and integration tests for the JobHub scraping pipeline.
"""
