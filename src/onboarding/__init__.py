"""Client onboarding service.

Provisions identities in an identity provider, links them to client records
held by an external resource service, and issues signed bearer tokens.
"""

__version__ = "0.1.0"
