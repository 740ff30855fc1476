# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Unit tests for RallyClient."""

import unittest

import pandas as pd

from Rally.Wsapi.client import RallyClient
from Rally.Wsapi.core.config import WsapiConfig
from Rally.Wsapi.core.errors import RequestError
from Rally.Wsapi.request import Request
from tests.unit.test_helpers import FakeTransport, envelope_ok, token_response

REF = "https://rally1.rallydev.com/slm/webservice/v2.0/defect/1234"
WSAPI = "https://rally1.rallydev.com/slm/webservice/v2.0"


class TestRallyClientConstruction(unittest.TestCase):
    def test_arguments_override_config(self):
        client = RallyClient("http://www.acme.com", "_key", config=WsapiConfig(), transport=FakeTransport())
        self.assertEqual(client.config.server, "http://www.acme.com")
        self.assertEqual(client.config.api_key, "_key")

    def test_request_created_lazily(self):
        transport = FakeTransport()
        client = RallyClient(config=WsapiConfig(), transport=transport)
        self.assertEqual(transport.defaults_calls, [])
        self.assertIsInstance(client.request, Request)
        self.assertIs(client.request, client.request)
        self.assertEqual(len(transport.defaults_calls), 1)

    def test_api_key_and_integration_headers(self):
        transport = FakeTransport()
        config = WsapiConfig(
            api_key="_key",
            integration_name="Sync",
            request_options={"headers": {"X-Extra": "1"}, "timeout": 4},
        )
        RallyClient(config=config, transport=transport).request
        (defaults,) = transport.defaults_calls
        self.assertEqual(defaults["headers"]["zsessionid"], "_key")
        self.assertEqual(defaults["headers"]["X-RallyIntegrationName"], "Sync")
        self.assertEqual(defaults["headers"]["X-Extra"], "1")
        self.assertEqual(defaults["timeout"], 4)

    def test_no_api_key_header_without_key(self):
        transport = FakeTransport()
        RallyClient(config=WsapiConfig(), transport=transport).request
        self.assertNotIn("zsessionid", transport.defaults_calls[0]["headers"])

    def test_context_manager_closes_request(self):
        transport = FakeTransport()
        with RallyClient(config=WsapiConfig(), transport=transport) as client:
            client.request
        self.assertEqual(transport.close_count, 1)
        self.assertIsNone(client._request)

    def test_close_idempotent(self):
        client = RallyClient(config=WsapiConfig(), transport=FakeTransport())
        client.close()
        client.close()


class TestRallyClientRecords(unittest.TestCase):
    def setUp(self):
        self.ok = envelope_ok("OperationResult", Object={"_ref": REF, "Name": "Login fails"})

    def make_client(self, responses):
        self.transport = FakeTransport(responses)
        return RallyClient(config=WsapiConfig(), transport=self.transport)

    def test_create_posts_with_token(self):
        client = self.make_client({"get": [token_response("T")], "post": [(None, 200, self.ok)]})
        result = client.create("defect", {"Name": "Login fails"}, fetch=["Name", "State"]).result()
        self.assertEqual(result["Object"]["Name"], "Login fails")
        (sent,) = self.transport.calls["post"]
        self.assertEqual(sent["url"], WSAPI + "/defect/create")
        self.assertEqual(sent["json"], {"defect": {"Name": "Login fails"}})
        self.assertEqual(sent["qs"], {"fetch": "Name,State", "key": "T"})

    def test_get_by_full_ref(self):
        body = {"Result": {"Errors": [], "Warnings": [], "Name": "x"}}
        client = self.make_client({"get": [(None, 200, body)]})
        result = client.get(REF, fetch=True).result()
        self.assertEqual(result["Name"], "x")
        (sent,) = self.transport.calls["get"]
        self.assertEqual(sent["url"], REF)
        self.assertEqual(sent["qs"], {"fetch": "true"})

    def test_update_posts_to_ref(self):
        client = self.make_client({"get": [token_response("T")], "post": [(None, 200, self.ok)]})
        client.update({"_ref": REF}, {"State": "Open"}).result()
        (sent,) = self.transport.calls["post"]
        self.assertEqual(sent["url"], REF)
        self.assertEqual(sent["json"], {"defect": {"State": "Open"}})
        self.assertEqual(sent["qs"], {"key": "T"})

    def test_delete(self):
        client = self.make_client({"get": [token_response("T")], "delete": [(None, 200, envelope_ok("OperationResult"))]})
        calls = []
        client.delete("/defect/1234", lambda errors, result: calls.append((errors, result)))
        self.assertEqual(self.transport.calls["delete"][0]["url"], REF)
        self.assertEqual(self.transport.calls["delete"][0]["qs"], {"key": "T"})
        self.assertIsNone(calls[0][0])

    def test_delete_token_failure(self):
        client = self.make_client({"get": [(None, 200, {"OperationResult": {"Errors": ["Not authorized"]}})]})
        error = client.delete(REF).exception()
        self.assertIsInstance(error, RequestError)
        self.assertEqual(error.errors, ["Not authorized"])
        self.assertEqual(self.transport.calls["delete"], [])

    def test_query_parameters(self):
        body = envelope_ok(TotalResultCount=0, Results=[])
        client = self.make_client({"get": [(None, 200, body)]})
        client.query("defect", query='(State = "Open")', fetch="Name", order="Rank", pagesize=20).result()
        (sent,) = self.transport.calls["get"]
        self.assertEqual(sent["url"], WSAPI + "/defect")
        self.assertEqual(
            sent["qs"], {"query": '(State = "Open")', "fetch": "Name", "order": "Rank", "pagesize": 20}
        )

    def test_query_dataframe(self):
        body = envelope_ok(
            Results=[
                {"_ref": REF, "_type": "Defect", "Name": "a", "Owner": {"_ref": "/user/1", "_refObjectName": "Ann"}},
                {"_ref": REF + "5", "_type": "Defect", "Name": "b", "Owner": None},
            ]
        )
        client = self.make_client({"get": [(None, 200, body)]})
        df = client.query_dataframe("defect", fetch="Name,Owner").result()
        self.assertIsInstance(df, pd.DataFrame)
        self.assertEqual(list(df.columns), ["_ref", "Name", "Owner"])
        self.assertEqual(df.loc[0, "Owner"], "Ann")

    def test_query_dataframe_propagates_errors(self):
        body = {"Result": {"Errors": ["Could not parse"], "Warnings": []}}
        client = self.make_client({"get": [(None, 200, body)]})
        error = client.query_dataframe("defect", query="(").exception()
        self.assertEqual(error.errors, ["Could not parse"])


if __name__ == "__main__":
    unittest.main()
