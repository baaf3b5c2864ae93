"""
HTTP conversion service for postman2insomnia.
"""
