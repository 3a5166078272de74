"""
Credentials for the object store, resolved once when a driver is built.

An API key means Rackspace Cloud Files, a password means a plain OpenStack
Swift deployment behind Keystone.

Rackspace identity only accepts an API key through its own v1.0 endpoint
(user + key headers), so the Rackspace variant authenticates with swiftclient
auth "1.0". The OpenStack variant goes through Keystone v2.0, which needs
python-keystoneclient and a tenant.
"""

from collections import namedtuple

RACKSPACE_AUTH_URL = "https://identity.api.rackspacecloud.com/"
RACKSPACE_REGION = "DFW"
RACKSPACE_AUTH_VERSION = "1.0"
OPENSTACK_AUTH_VERSION = "2.0"


class RackspaceCredentials(namedtuple(
        "RackspaceCredentials", ["username", "api_key", "url", "region", "tenant_name"])):
    __slots__ = ()

    kind = "rackspace"

    def connection_options(self):
        # v1.0 auth has no tenant and hands back the account's storage URL
        return {
            "authurl": self.url,
            "user": self.username,
            "key": self.api_key,
            "auth_version": RACKSPACE_AUTH_VERSION,
            "os_options": {
                "region_name": self.region,
                "service_type": "object-store",
            },
        }


class OpenStackCredentials(namedtuple(
        "OpenStackCredentials", ["username", "password", "url", "region", "tenant_name"])):
    __slots__ = ()

    kind = "openstack"

    def connection_options(self):
        return {
            "authurl": self.url,
            "user": self.username,
            "key": self.password,
            "auth_version": OPENSTACK_AUTH_VERSION,
            "tenant_name": self.tenant_name,
            "os_options": {
                "region_name": self.region,
                "service_type": "object-store",
                "tenant_name": self.tenant_name,
            },
        }


def rackspace_auth_url(url):
    """
    Point a Rackspace identity URL at its v1.0 endpoint, dropping any
    version path the caller already gave.
    """
    host_start = url.find("://")
    host_start = host_start + 3 if host_start != -1 else 0
    pos = url.lower().find("/v", host_start)
    if pos != -1:
        url = url[:pos]
    if not url.endswith("/"):
        url += "/"
    return url + "v" + RACKSPACE_AUTH_VERSION


def resolve_credentials(config):
    """
    Build the credentials variant described by a configuration mapping.

    Raises ValueError when a required setting is missing.
    """
    username = config.get("username")
    if not username:
        raise ValueError("Object Store username can not be empty.")

    tenant_name = config.get("tenant_name") or ""
    api_key = config.get("api_key")

    if api_key:
        url = config.get("url") or RACKSPACE_AUTH_URL
        region = config.get("region") or RACKSPACE_REGION
    else:
        password = config.get("password")
        if not password:
            raise ValueError("Object Store credentials must contain an API key or a password.")
        url = config.get("url")
        region = config.get("region")

    if not url:
        raise ValueError("Object Store authentication URL can not be empty.")
    if not region:
        raise ValueError("Object Store region can not be empty.")

    if api_key:
        return RackspaceCredentials(username, api_key, rackspace_auth_url(url), region, tenant_name)
    if not tenant_name:
        raise ValueError("Object Store tenant name can not be empty.")
    return OpenStackCredentials(username, password, url, region, tenant_name)
