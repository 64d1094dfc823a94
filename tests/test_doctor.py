from viewgate.config import InstancesConfig, ServerInstance
from viewgate.connection import ConnectionValidator
from viewgate.doctor import doctor_report
from viewgate.errors import WebServiceError

from conftest import SERVER_URL, FakeTransport


def test_doctor_no_instances():
    report = doctor_report(InstancesConfig(), ConnectionValidator(FakeTransport()))
    assert not report.ok
    assert report.items[0].status == "FAIL"


def test_doctor_all_ok(instances):
    report = doctor_report(instances, ConnectionValidator(FakeTransport()))
    assert report.ok
    assert [(i.name, i.status) for i in report.items] == [(SERVER_URL, "OK")]
    assert "Successfully connected" in report.items[0].details


def test_doctor_one_failing_instance():
    instances = InstancesConfig(
        instances=(
            ServerInstance(url=SERVER_URL),
            ServerInstance(url="http://half-configured", username="builder"),
        )
    )
    report = doctor_report(instances, ConnectionValidator(FakeTransport()))
    assert not report.ok
    assert [i.status for i in report.items] == ["OK", "FAIL"]


def test_doctor_unauthorized(instances):
    validator = ConnectionValidator(FakeTransport(connect_error=WebServiceError("401 Unauthorized")))
    report = doctor_report(instances, validator)
    assert not report.ok
    assert "Web service error" in report.items[0].details
