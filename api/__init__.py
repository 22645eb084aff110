"""HTTP dependencies and operational routes"""
