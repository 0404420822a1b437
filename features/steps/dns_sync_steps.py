"""
Step definitions for WHOIS DNS sync scenarios.
"""

import json

from behave import given, when, then

from whois_dns_sync.core.config import SyncConfig
from whois_dns_sync.core.dns_manager import DNSRecordManager
from whois_dns_sync.core.sync_handler import DNSSyncHandler
from whois_dns_sync.utils.validators import is_within


def _record_set(fqdn, record_type, value):
    return {"fqdn": fqdn, "type": record_type, "ttl": 300, "values": [value]}


def _write_json(context, relative_path, data):
    path = context.workspace / relative_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))


def _read_result(context):
    with open(context.workspace / "dns-sync-result.json", "r") as f:
        return json.load(f)


@given("the WHOIS DNS sync uses the mock DNS provider")
def step_impl(context):
    context.provider_config = {"default_provider": "mock", "dns_providers": {"mock": {}}}


@given('the WHOIS file "{path}" declares the record "{record}"')
def step_impl(context, path, record):
    name, record_type, value = record.split()
    domain, sld = path[len("whois/"):-len(".json")].split(".", 1)
    _write_json(
        context,
        path,
        {
            "domain": domain,
            "sld": sld,
            "records": [{"name": name, "type": record_type, "value": value}],
        },
    )


@given('the DNS provider serves "{record}"')
def step_impl(context, record):
    fqdn, record_type, value = record.split()
    context.provider_records.append(_record_set(fqdn, record_type, value))


@given('a merged PR titled "{title}" that added both "{first}" and "{second}"')
def step_impl(context, title, first, second):
    context.env["PR_TITLE"] = title
    _write_json(
        context,
        "pr-files.json",
        [{"filename": first, "status": "added"}, {"filename": second, "status": "added"}],
    )


@given('a merged PR titled "{title}" that {status} "{filename}"')
def step_impl(context, title, status, filename):
    context.env["PR_TITLE"] = title
    _write_json(context, "pr-files.json", [{"filename": filename, "status": status}])


@given('a manual sync requesting operation "{operation}"')
def step_impl(context, operation):
    context.env["MANUAL_OPERATION"] = operation


@given('a forced manual sync of domain "{domain}" with operation "{operation}"')
def step_impl(context, domain, operation):
    context.env.update(
        {"MANUAL_DOMAIN": domain, "MANUAL_OPERATION": operation, "FORCE_SYNC": "true"}
    )


@when("the DNS sync runs")
def step_impl(context):
    context.provider_config["dns_providers"]["mock"]["records"] = context.provider_records
    context.dns_manager = DNSRecordManager(context.provider_config)
    handler = DNSSyncHandler(SyncConfig.from_env(context.env), context.dns_manager)

    try:
        context.result = handler.handle_sync()
    except Exception as e:
        context.error = e


@then("the sync should succeed")
def step_impl(context):
    assert context.error is None, f"DNS sync failed: {context.error}"
    assert context.result["success"] is True
    assert _read_result(context)["success"] is True


@then('the sync should fail mentioning "{text}"')
def step_impl(context, text):
    assert context.error is not None, "DNS sync should have failed"
    result = _read_result(context)
    assert result["success"] is False
    assert text in result["error"], f"'{text}' not in error: {result['error']}"


@then('the result file should record trigger type "{trigger_type}"')
def step_impl(context, trigger_type):
    assert _read_result(context)["triggerType"] == trigger_type


@then('the result should record operation "{operation}" for domain "{domain}" and SLD "{sld}"')
def step_impl(context, operation, domain, sld):
    result = _read_result(context)
    assert result["operation"] == operation
    assert result["domain"] == domain
    assert result["sld"] == sld


@then('the DNS provider should serve "{record}"')
def step_impl(context, record):
    fqdn, record_type, value = record.split()
    records = context.dns_manager.dns_client.provider.records
    assert any(
        r["fqdn"] == fqdn and r["type"] == record_type and value in r["values"]
        for r in records
    ), f"{record} not served, provider has: {records}"


@then('the DNS provider should not serve "{fqdn}"')
def step_impl(context, fqdn):
    records = context.dns_manager.dns_client.provider.records
    assert not any(is_within(r["fqdn"], fqdn) for r in records), (
        f"{fqdn} still served: {records}"
    )
