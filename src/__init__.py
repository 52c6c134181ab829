"""
Catalog Insights Service
"""
