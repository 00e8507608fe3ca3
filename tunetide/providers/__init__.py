"""Concrete adapters behind the interfaces in :mod:`tunetide.interfaces`."""
