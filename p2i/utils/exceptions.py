"""
Custom exception hierarchy for postman2insomnia.

Conversion problems that are local to a single rule or a single request
field are handled in place (warning + default). The exceptions below cover
the conditions that make a whole input file, or the converter settings,
unusable.
"""


class P2IError(Exception):
    """
    Base exception class for all postman2insomnia errors.

    The batch converter catches this class per input file so that one bad
    file never aborts the rest of the batch.
    """
    pass


class ConfigurationError(P2IError):
    """
    Exception raised for configuration-related errors.

    This includes:
    - Missing converter settings or transform configuration files
    - Invalid JSON in configuration files
    - Invalid output format or trace log verbosity
    - Transform rules missing a name, pattern or replacement
    """
    pass


class CollectionParsingError(P2IError):
    """
    Exception raised when an input document cannot be parsed.

    This includes:
    - Input text that is not valid JSON
    - A JSON document whose root is not an object
    """
    pass


class UnsupportedSchemaError(P2IError):
    """
    Exception raised for documents the importer does not recognise.

    This includes:
    - Collections declaring a schema URL other than v2.0.0 / v2.1.0
    - JSON documents that are neither a collection nor an environment
    """
    pass


class ValidationError(P2IError):
    """
    Exception raised for validation failures.

    This includes:
    - Rules added under an unknown phase or with a duplicate name
    - Unknown output formats handed to the document writer
    """
    pass
