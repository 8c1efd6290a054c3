"""Gateways: I/O boundaries with real and fake implementations."""
