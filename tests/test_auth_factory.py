"""Tests for explicit and header-inferred authentication."""

import unittest

from p2i.generators.auth_factory import AuthFactory


def header(key, value):
    return {"key": key, "value": value}


class TestExplicitAuth(unittest.TestCase):
    def setUp(self):
        self.factory = AuthFactory()

    def test_bearer_v21_list_params(self):
        auth = {"type": "bearer", "bearer": [{"key": "token", "value": "{{token}}", "type": "string"}]}
        result = self.factory.resolve(auth, [])
        self.assertEqual(result["authentication"],
                         {"type": "bearer", "token": "{{token}}", "prefix": "", "disabled": False})

    def test_basic_v20_mapping_params(self):
        auth = {"type": "basic", "basic": {"username": "alice", "password": "s3cret"}}
        authentication = self.factory.resolve(auth)["authentication"]
        self.assertEqual(authentication["type"], "basic")
        self.assertEqual(authentication["username"], "alice")
        self.assertEqual(authentication["password"], "s3cret")

    def test_hyphenated_variables_normalised(self):
        auth = {"type": "bearer", "bearer": [{"key": "token", "value": "{{api-token}}"}]}
        authentication = self.factory.resolve(auth)["authentication"]
        self.assertEqual(authentication["token"], "{{_['api-token']}}")

    def test_oauth1_defaults(self):
        auth = {"type": "oauth1", "oauth1": [
            {"key": "consumerKey", "value": "ck"},
            {"key": "token", "value": "tk"},
        ]}
        authentication = self.factory.resolve(auth)["authentication"]
        self.assertEqual(authentication["consumerKey"], "ck")
        self.assertEqual(authentication["tokenKey"], "tk")
        self.assertEqual(authentication["signatureMethod"], "HMAC-SHA1")

    def test_oauth2_grant_type_mapping(self):
        auth = {"type": "oauth2", "oauth2": [
            {"key": "grant_type", "value": "password_credentials"},
            {"key": "authUrl", "value": "https://auth.example.com/authorize"},
            {"key": "accessTokenUrl", "value": "https://auth.example.com/token"},
        ]}
        authentication = self.factory.resolve(auth)["authentication"]
        self.assertEqual(authentication["grantType"], "password")
        self.assertEqual(authentication["authorizationUrl"], "https://auth.example.com/authorize")
        self.assertEqual(authentication["accessTokenUrl"], "https://auth.example.com/token")

        pkce = {"type": "oauth2", "oauth2": [{"key": "grant_type", "value": "authorization_code_with_pkce"}]}
        self.assertEqual(self.factory.resolve(pkce)["authentication"]["grantType"], "authorization_code")

    def test_apikey_placement(self):
        header_auth = {"type": "apikey", "apikey": [{"key": "key", "value": "X-Key"}, {"key": "value", "value": "v"}]}
        query_auth = {"type": "apikey", "apikey": [{"key": "key", "value": "k"}, {"key": "in", "value": "query"}]}
        self.assertEqual(self.factory.resolve(header_auth)["authentication"]["addTo"], "header")
        self.assertEqual(self.factory.resolve(query_auth)["authentication"]["addTo"], "queryParams")

    def test_awsv4_maps_to_iam(self):
        auth = {"type": "awsv4", "awsv4": [
            {"key": "accessKey", "value": "AKID"},
            {"key": "secretKey", "value": "shh"},
            {"key": "region", "value": "eu-west-1"},
            {"key": "service", "value": "s3"},
        ]}
        authentication = self.factory.resolve(auth)["authentication"]
        self.assertEqual(authentication["type"], "iam")
        self.assertEqual(authentication["accessKeyId"], "AKID")
        self.assertEqual(authentication["region"], "eu-west-1")

    def test_unknown_type_dropped(self):
        headers = [header("Authorization", "Bearer ignored")]
        result = self.factory.resolve({"type": "ntlm", "ntlm": []}, headers)
        self.assertEqual(result["authentication"], {})
        self.assertEqual(result["headers"], headers)

    def test_explicit_auth_wins_over_header(self):
        auth = {"type": "basic", "basic": {"username": "u", "password": "p"}}
        result = self.factory.resolve(auth, [header("Authorization", "Bearer abc")])
        self.assertEqual(result["authentication"]["type"], "basic")

    def test_malformed_params_do_not_raise(self):
        authentication = self.factory.resolve({"type": "bearer", "bearer": "weird"})["authentication"]
        self.assertEqual(authentication["token"], "")


class TestInferredAuth(unittest.TestCase):
    def setUp(self):
        self.factory = AuthFactory()

    def test_no_auth_anywhere(self):
        self.assertEqual(self.factory.resolve(None, [])["authentication"], {})
        self.assertEqual(self.factory.resolve(None, None), {"authentication": {}, "headers": []})

    def test_bearer_header(self):
        headers = [header("Authorization", "Bearer abc123"), header("Accept", "*/*")]
        result = self.factory.resolve(None, headers)
        self.assertEqual(result["authentication"]["type"], "bearer")
        self.assertEqual(result["authentication"]["token"], "abc123")
        self.assertEqual(result["headers"], headers)

    def test_scheme_is_case_insensitive(self):
        result = self.factory.resolve(None, [header("authorization", "bearer abc")])
        self.assertEqual(result["authentication"]["token"], "abc")

    def test_noauth_falls_back_to_header(self):
        result = self.factory.resolve({"type": "noauth"}, [header("Authorization", "Bearer t")])
        self.assertEqual(result["authentication"]["type"], "bearer")

    def test_basic_header_decoded(self):
        result = self.factory.resolve(None, [header("Authorization", "Basic dXNlcjpwYXNz")])
        self.assertEqual(result["authentication"]["username"], "user")
        self.assertEqual(result["authentication"]["password"], "pass")

    def test_basic_header_with_template(self):
        authentication = self.factory.resolve(None, [header("Authorization", "Basic {{creds}}")])["authentication"]
        self.assertEqual(authentication["type"], "basic")
        self.assertEqual(authentication["username"], "")

    def test_digest_header(self):
        value = 'Digest username="alice", realm="api", nonce="abc"'
        authentication = self.factory.resolve(None, [header("Authorization", value)])["authentication"]
        self.assertEqual(authentication["type"], "digest")
        self.assertEqual(authentication["username"], "alice")

    def test_oauth1_header(self):
        value = 'OAuth oauth_consumer_key="ck", oauth_token="tk", oauth_signature_method="HMAC-SHA256"'
        authentication = self.factory.resolve(None, [header("Authorization", value)])["authentication"]
        self.assertEqual(authentication["type"], "oauth1")
        self.assertEqual(authentication["consumerKey"], "ck")
        self.assertEqual(authentication["tokenKey"], "tk")
        self.assertEqual(authentication["signatureMethod"], "HMAC-SHA256")

    def test_aws_signature_consumes_signing_headers(self):
        headers = [
            header("Authorization", "AWS4-HMAC-SHA256 Credential=AKIDEXAMPLE/20150830/us-east-1/iam/aws4_request, "
                                    "SignedHeaders=host;x-amz-date, Signature=5d672d79"),
            header("X-Amz-Date", "20150830T123600Z"),
            header("X-Amz-Security-Token", "session-token"),
            header("Content-Type", "application/json"),
        ]
        result = self.factory.resolve(None, headers)
        authentication = result["authentication"]

        self.assertEqual(authentication["type"], "iam")
        self.assertEqual(authentication["accessKeyId"], "AKIDEXAMPLE")
        self.assertEqual(authentication["region"], "us-east-1")
        self.assertEqual(authentication["service"], "iam")
        self.assertEqual(authentication["sessionToken"], "session-token")
        self.assertEqual(result["headers"], [header("Content-Type", "application/json")])
        self.assertEqual(len(headers), 4)

    def test_unknown_scheme(self):
        headers = [header("Authorization", "Token abc")]
        result = self.factory.resolve(None, headers)
        self.assertEqual(result["authentication"], {})
        self.assertEqual(result["headers"], headers)

    def test_garbage_input(self):
        result = self.factory.resolve("not-a-dict", ["not-a-header", header("Authorization", "")])
        self.assertEqual(result["authentication"], {})

        self.assertEqual(self.factory.resolve({"type": ["basic"]}, [])["authentication"], {})

        auth = {"type": "basic", "basic": [{"key": ["username"], "value": "x"},
                                           {"key": "password", "value": "secret"}]}
        authentication = self.factory.resolve(auth, [])["authentication"]
        self.assertEqual(authentication["username"], "")
        self.assertEqual(authentication["password"], "secret")

        oauth2 = {"type": "oauth2", "oauth2": [{"key": "grant_type", "value": ["password"]}]}
        self.assertEqual(self.factory.resolve(oauth2, [])["authentication"]["grantType"], "authorization_code")


if __name__ == "__main__":
    unittest.main()
