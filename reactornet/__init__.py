"""Reactor-style event loops, timers, buffers and a TCP acceptor for Linux."""

__version__ = "0.1.0"