"""Admin dashboard for the El Buen Menú food-ordering platform."""

__version__ = "0.1.0"
