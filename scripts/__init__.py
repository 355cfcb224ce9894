"""Command line tools for the aquarium dosing engine."""
