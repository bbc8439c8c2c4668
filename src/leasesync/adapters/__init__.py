"""Adapters for the source (Buildium) and target (HubSpot) systems."""
