"""gotestfinder — find, pick and run Go tests and subtests."""

__version__ = "0.1.0"
