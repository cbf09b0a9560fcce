"""
All the routines to talk to the Kubernetes API.

The layers, from the lowest to the highest:

* `auth` -- the authenticated transport (an aiohttp session with SSL & headers).
* `api` -- the raw HTTP verbs with the errors and payloads decoded.
* `resources` -- the typed per-kind clients on top of the routes & the registry.
* `applying` -- the manifest-directory applier, routed by the manifests' own fields.
* `cluster` -- the user-facing handle that binds all of the above together.
"""
