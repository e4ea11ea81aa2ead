"""Storage adapters implementing the component ports."""
