"""Metric catalog, sink and registry"""
