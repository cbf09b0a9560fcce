"""
General-purpose helpers not related to the Kubernetes API itself
(neither to the clients nor to the structs), which are used to prepare
and control the runtime environment: logging, versions, type aliases.

Utilities do not depend on anything else in the library.
"""
