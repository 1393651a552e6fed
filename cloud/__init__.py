"""Cloud API access"""
