"""
Keycloak SMTP Sync - keeps a Keycloak realm's SMTP settings in step with a
Kubernetes Secret.

The process:
- Watches Secrets in a single namespace with a reconnecting watch
- Reacts to modifications of one named Secret
- Writes the Secret's SMTP credentials into the realm through the admin API
"""

__version__ = "0.1.0"
