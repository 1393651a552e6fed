"""HTTP application for the OpenStack metrics exporter"""
