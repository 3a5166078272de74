import unittest

import mock
import swiftclient.client

from cloudfilesfs.credentials import (
    OpenStackCredentials, RackspaceCredentials, rackspace_auth_url, resolve_credentials)


class ResolveCredentialsTestCase(unittest.TestCase):

    def test_api_key_means_rackspace_with_defaults(self):
        creds = resolve_credentials({"username": "bob", "api_key": "k3y"})
        self.assertIsInstance(creds, RackspaceCredentials)
        self.assertEqual(creds.url, "https://identity.api.rackspacecloud.com/v1.0")
        self.assertEqual(creds.region, "DFW")

    def test_rackspace_url_version_is_replaced(self):
        creds = resolve_credentials({
            "username": "bob", "api_key": "k3y", "url": "https://lon.identity.api.rackspacecloud.com/v2.0/tokens",
            "region": "LON"})
        self.assertEqual(creds.url, "https://lon.identity.api.rackspacecloud.com/v1.0")
        self.assertEqual(creds.region, "LON")

    def test_rackspace_auth_url_keeps_hosts_starting_with_v(self):
        self.assertEqual(rackspace_auth_url("https://vault.example.com"), "https://vault.example.com/v1.0")
        self.assertEqual(rackspace_auth_url("https://auth.example.com/V2.0/"), "https://auth.example.com/v1.0")

    def test_password_means_openstack(self):
        creds = resolve_credentials({
            "username": "alice", "password": "secret", "url": "https://keystone.example.com:5000/v2.0",
            "region": "RegionOne", "tenant_name": "demo"})
        self.assertIsInstance(creds, OpenStackCredentials)
        self.assertEqual(creds.url, "https://keystone.example.com:5000/v2.0")
        self.assertEqual(creds.tenant_name, "demo")

    def test_openstack_has_no_defaults(self):
        with self.assertRaises(ValueError) as cm:
            resolve_credentials({"username": "alice", "password": "secret", "region": "RegionOne"})
        self.assertEqual(str(cm.exception), "Object Store authentication URL can not be empty.")
        with self.assertRaises(ValueError) as cm:
            resolve_credentials({"username": "alice", "password": "secret", "url": "https://keystone"})
        self.assertEqual(str(cm.exception), "Object Store region can not be empty.")

    def test_username_required(self):
        with self.assertRaises(ValueError) as cm:
            resolve_credentials({"api_key": "k3y"})
        self.assertEqual(str(cm.exception), "Object Store username can not be empty.")

    def test_key_or_password_required(self):
        with self.assertRaises(ValueError) as cm:
            resolve_credentials({"username": "bob", "url": "https://keystone", "region": "r"})
        self.assertEqual(str(cm.exception), "Object Store credentials must contain an API key or a password.")

    def test_openstack_requires_tenant(self):
        with self.assertRaises(ValueError) as cm:
            resolve_credentials({
                "username": "alice", "password": "pw", "url": "https://keystone", "region": "r"})
        self.assertEqual(str(cm.exception), "Object Store tenant name can not be empty.")

    def test_rackspace_tenant_is_optional(self):
        creds = resolve_credentials({"username": "bob", "api_key": "k3y"})
        self.assertEqual(creds.tenant_name, "")

    def test_connection_options(self):
        creds = resolve_credentials({"username": "bob", "api_key": "k3y"})
        options = creds.connection_options()
        self.assertEqual(options["authurl"], "https://identity.api.rackspacecloud.com/v1.0")
        self.assertEqual(options["user"], "bob")
        self.assertEqual(options["key"], "k3y")
        self.assertEqual(options["auth_version"], "1.0")
        self.assertNotIn("tenant_name", options)
        self.assertEqual(options["os_options"], {"region_name": "DFW", "service_type": "object-store"})

        creds = resolve_credentials({
            "username": "alice", "password": "pw", "url": "u", "region": "r", "tenant_name": "demo"})
        options = creds.connection_options()
        self.assertEqual(options["key"], "pw")
        self.assertEqual(options["auth_version"], "2.0")
        self.assertEqual(options["tenant_name"], "demo")
        self.assertEqual(options["os_options"], {
            "region_name": "r", "service_type": "object-store", "tenant_name": "demo"})


class SwiftclientAuthTestCase(unittest.TestCase):
    """Options from each variant must get past swiftclient's own checks."""

    def get_auth(self, creds):
        options = dict(creds.connection_options())
        return swiftclient.client.get_auth(
            options.pop("authurl"), options.pop("user"), options.pop("key"), **options)

    @mock.patch("swiftclient.client.get_auth_keystone")
    @mock.patch("swiftclient.client.get_auth_1_0")
    def test_rackspace_uses_api_key_auth(self, auth_1_0, auth_keystone):
        auth_1_0.return_value = ("https://storage101.dfw1.clouddrive.com/v1/MossoCloudFS_x", "tok")
        creds = resolve_credentials({"username": "bob", "api_key": "k3y"})

        url, token = self.get_auth(creds)

        self.assertEqual(token, "tok")
        self.assertEqual(auth_1_0.call_args[0][:3],
                         ("https://identity.api.rackspacecloud.com/v1.0", "bob", "k3y"))
        self.assertFalse(auth_keystone.called)

    @mock.patch("swiftclient.client.get_auth_keystone")
    def test_openstack_passes_tenant_to_keystone(self, auth_keystone):
        auth_keystone.return_value = ("https://swift.example.com/v1/AUTH_demo", "tok")
        creds = resolve_credentials({
            "username": "alice", "password": "pw", "url": "https://keystone.example.com:5000/v2.0",
            "region": "RegionOne", "tenant_name": "demo"})

        url, token = self.get_auth(creds)

        self.assertEqual(url, "https://swift.example.com/v1/AUTH_demo")
        args, kwargs = auth_keystone.call_args
        self.assertEqual(args[:3], ("https://keystone.example.com:5000/v2.0", "alice", "pw"))
        self.assertEqual(args[3]["tenant_name"], "demo")
        self.assertEqual(args[3]["region_name"], "RegionOne")
        self.assertEqual(kwargs["auth_version"], "2.0")
