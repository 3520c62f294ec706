"""Tabu and simple local-search optimizers, with drivers, for pickup-and-delivery routing."""

__version__ = "0.4.2"