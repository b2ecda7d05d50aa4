from __future__ import annotations


class AbiLinkerError(Exception):
    stage = "linker"


class ConfigurationError(AbiLinkerError):
    stage = "config"


class InputParseError(AbiLinkerError):
    stage = "parse"


class ResolutionError(AbiLinkerError):
    stage = "resolve"


class LinkError(AbiLinkerError):
    stage = "link"


class SerializationError(AbiLinkerError):
    stage = "serialize"
