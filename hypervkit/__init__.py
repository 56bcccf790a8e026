"""Hyper-V resource helpers: setting validators and lifecycle logic for VHDs, ISO images and virtual switches."""

__version__ = "0.1.0"