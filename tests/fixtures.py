"""Builders for Postman documents used across the test suite."""

import json

SCHEMA_V2_0 = "https://schema.getpostman.com/json/collection/v2.0.0/collection.json"
SCHEMA_V2_1 = "https://schema.getpostman.com/json/collection/v2.1.0/collection.json"


def make_collection(items=None, name="Test API", schema=SCHEMA_V2_1, **extra):
    collection = {
        "info": {"name": name, "schema": schema},
        "item": items if items is not None else [],
    }
    collection.update(extra)
    return collection


def make_request(name, method="GET", url="https://api.example.com/items", **request_fields):
    request = {"method": method, "url": url}
    request.update(request_fields)
    return {"name": name, "request": request}


def make_folder(name, items, **extra):
    folder = {"name": name, "item": items}
    folder.update(extra)
    return folder


def make_event(listen, *lines):
    return {"listen": listen, "script": {"type": "text/javascript", "exec": list(lines)}}


def make_environment(values, name="Staging", scope="environment"):
    return {
        "name": name,
        "_postman_variable_scope": scope,
        "values": values,
    }


def dumps(document):
    return json.dumps(document)
