"""Base service class for domain services."""


class Service:
    """Base class for all domain services.

    Domain services hold invite rules that span an entity and its store,
    such as checking a code or recording its use.
    """

    pass
