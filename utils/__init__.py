"""Helpers for subnet accounting and host topology"""
