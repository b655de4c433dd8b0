"""Tools for driving and observing mobile devices."""
