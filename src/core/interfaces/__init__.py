"""Core interfaces.

Contracts (Protocol) implemented by concrete adapters, so services depend on
abstractions and tests can pass in fakes.
"""
