"""Reporting helpers built on allure-pytest."""
