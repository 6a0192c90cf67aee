import pytest

from ec2_inventory.models import AccountResult, InstanceRecord


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """Fake credentials so no test can reach a real AWS account"""
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_SECURITY_TOKEN', 'testing')
    monkeypatch.setenv('AWS_SESSION_TOKEN', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')
    monkeypatch.delenv('AWS_PROFILE', raising=False)


@pytest.fixture
def sample_records():
    return [
        InstanceRecord('111', 'i-abc', 'web1', 't3.micro'),
        InstanceRecord('111', 'i-def', '-', 'm5.large'),
        InstanceRecord('222', 'i-0123456789abcdef0', 'db, primary "A"', 'r5.xlarge'),
    ]


@pytest.fixture
def sample_results(sample_records):
    return [
        AccountResult.success('111', 'arn:aws:iam::111:role/A', sample_records[:2], 0.4),
        AccountResult.success('222', 'arn:aws:iam::222:role/B', sample_records[2:], 0.7),
        AccountResult.failure('333', 'arn:aws:iam::333:role/C', 'AccessDenied', 0.1),
    ]

