"""
House Rental API.
Listings with geospatial search, property requests and geolocation services.
"""

__version__ = "1.0.0"
