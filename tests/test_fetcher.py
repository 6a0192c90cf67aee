"""
Tests for the per-account fetcher
"""
from itertools import chain, repeat
from unittest.mock import MagicMock, patch

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from ec2_inventory.config import InventorySettings
from ec2_inventory.discovery.fetcher import AccountFetcher, create_base_session, extract_name_tag
from ec2_inventory.exceptions import ConfigError, FetchError
from ec2_inventory.models import FetchStatus, InstanceRecord

ROLE_ARN = 'arn:aws:iam::123456789012:role/InventoryReader'
AMI_ID = 'ami-12c6146b'


def make_instance(instance_id, instance_type='t3.micro', tags=None):
    instance = {'InstanceId': instance_id, 'InstanceType': instance_type}
    if tags is not None:
        instance['Tags'] = [{'Key': k, 'Value': v} for k, v in tags]
    return instance


def make_page(*instances, next_token=None):
    page = {'Reservations': [{'Instances': list(instances)}]}
    if next_token:
        page['NextToken'] = next_token
    return page


@pytest.fixture
def ec2_client():
    return MagicMock()


@pytest.fixture
def fetcher_factory(ec2_client):
    """Build a fetcher whose assumed-role session hands out the mocked EC2 client"""
    def factory(**settings):
        fetcher = AccountFetcher(MagicMock(region_name='us-east-1'), InventorySettings(**settings))
        session = MagicMock()
        session.client.return_value = ec2_client
        fetcher.assume_role = MagicMock(return_value=session)
        return fetcher
    return factory


@pytest.mark.parametrize('tags, expected', [
    ([{'Key': 'Name', 'Value': 'web1'}], 'web1'),
    ([{'Key': 'Env', 'Value': 'prod'}, {'Key': 'Name', 'Value': 'api'}], 'api'),
    ([{'Key': 'Name', 'Value': 'first'}, {'Key': 'Name', 'Value': 'second'}], 'first'),
    ([{'Key': 'name', 'Value': 'lower'}, {'Key': 'NAME', 'Value': 'upper'}], '-'),
    ([{'Key': 'Name', 'Value': ''}], ''),
    ([], '-'),
    (None, '-'),
])
def test_extract_name_tag(tags, expected):
    assert extract_name_tag(tags) == expected


def test_fetch_single_instance(fetcher_factory, ec2_client):
    ec2_client.describe_instances.return_value = make_page(
        make_instance('i-abc', 't3.micro', [('Name', 'web1')])
    )

    records = fetcher_factory().fetch('111', 'arn:aws:iam::111:role/A')

    assert records == [InstanceRecord('111', 'i-abc', 'web1', 't3.micro')]


def test_fetch_flattens_reservations(fetcher_factory, ec2_client):
    ec2_client.describe_instances.return_value = {
        'Reservations': [
            {'Instances': [make_instance('i-1'), make_instance('i-2', tags=[])]},
            {'Instances': [make_instance('i-3', 'c5.large', [('Env', 'dev')])]},
            {'Instances': []},
        ]
    }

    result = fetcher_factory().fetch_account('222', 'arn')

    assert result.status == FetchStatus.SUCCESS
    assert [(r.instance_id, r.tag_name, r.instance_type) for r in result.records] == [
        ('i-1', '-', 't3.micro'),
        ('i-2', '-', 't3.micro'),
        ('i-3', '-', 'c5.large'),
    ]
    assert {r.account_id for r in result.records} == {'222'}


def test_follows_every_page(fetcher_factory, ec2_client):
    ec2_client.describe_instances.side_effect = [
        make_page(make_instance('i-1'), next_token='token-1'),
        make_page(make_instance('i-2'), next_token='token-2'),
        make_page(make_instance('i-3')),
    ]

    records = fetcher_factory(page_size=5).fetch('111', 'arn')

    assert [r.instance_id for r in records] == ['i-1', 'i-2', 'i-3']
    calls = ec2_client.describe_instances.call_args_list
    assert calls[0].kwargs == {'MaxResults': 5}
    assert calls[2].kwargs == {'MaxResults': 5, 'NextToken': 'token-2'}


def test_first_page_only(fetcher_factory, ec2_client):
    ec2_client.describe_instances.side_effect = [
        make_page(make_instance('i-1'), next_token='token-1'),
        make_page(make_instance('i-2')),
    ]

    records = fetcher_factory(paginate=False).fetch('111', 'arn')

    assert [r.instance_id for r in records] == ['i-1']
    assert ec2_client.describe_instances.call_count == 1


def test_describe_failure_becomes_empty_result(fetcher_factory, ec2_client):
    ec2_client.describe_instances.side_effect = ClientError(
        {'Error': {'Code': 'RequestLimitExceeded', 'Message': 'Slow down'}},
        'DescribeInstances'
    )
    fetcher = fetcher_factory()

    result = fetcher.fetch_account('222', 'arn')

    assert result.status == FetchStatus.FAILURE
    assert 'RequestLimitExceeded' in result.error
    assert result.records == []
    assert fetcher.fetch('222', 'arn') == []


def test_unexpected_error_becomes_failure(fetcher_factory, ec2_client):
    ec2_client.describe_instances.return_value = {'Reservations': [{'Instances': [{}]}]}

    result = fetcher_factory().fetch_account('111', 'arn')

    assert not result.succeeded
    assert result.error.startswith('Unexpected error')


def test_assume_role_failure():
    base_session = MagicMock(region_name='us-east-1')
    base_session.client.return_value.assume_role.side_effect = ClientError(
        {'Error': {'Code': 'AccessDenied', 'Message': 'Not authorized'}},
        'AssumeRole'
    )
    fetcher = AccountFetcher(base_session)

    with pytest.raises(FetchError) as exc_info:
        fetcher.assume_role('333', 'arn:aws:iam::333:role/C')
    assert exc_info.value.account_id == '333'

    result = fetcher.fetch_account('333', 'arn:aws:iam::333:role/C')
    assert result.status == FetchStatus.FAILURE
    assert 'AccessDenied' in result.error


def test_empty_role_arn_fails_without_calling_sts():
    base_session = MagicMock(region_name='us-east-1')
    fetcher = AccountFetcher(base_session)

    result = fetcher.fetch_account('111', '')

    assert not result.succeeded
    assert result.error == 'No role ARN configured'
    base_session.client.assert_not_called()


def test_assume_role_parameters():
    base_session = MagicMock(region_name='eu-west-1')
    sts = base_session.client.return_value
    sts.assume_role.return_value = {
        'Credentials': {'AccessKeyId': 'AKIA', 'SecretAccessKey': 'secret', 'SessionToken': 'token'}
    }
    fetcher = AccountFetcher(base_session, InventorySettings(external_id='ext-123'))

    session = fetcher.assume_role('111', 'arn:aws:iam::111:role/A')

    sts.assume_role.assert_called_once_with(
        RoleArn='arn:aws:iam::111:role/A',
        RoleSessionName='ec2-inventory-111',
        ExternalId='ext-123'
    )
    assert session.region_name == 'eu-west-1'


def test_cancelled_fetch(fetcher_factory, ec2_client):
    fetcher = fetcher_factory()
    fetcher.cancel()

    result = fetcher.fetch_account('111', 'arn')

    assert result.error == 'Cancelled'
    ec2_client.describe_instances.assert_not_called()


def test_timeout_between_pages(fetcher_factory, ec2_client):
    ec2_client.describe_instances.side_effect = [
        make_page(make_instance('i-1'), next_token='token-1'),
        make_page(make_instance('i-2')),
    ]
    fetcher = fetcher_factory(task_timeout=60)

    # start, check before assume, check before page 1, then the clock jumps
    clock = chain([0.0, 0.0, 0.0], repeat(1000.0))
    with patch('ec2_inventory.discovery.fetcher.time.monotonic', side_effect=clock):
        result = fetcher.fetch_account('111', 'arn')

    assert not result.succeeded
    assert result.error == 'Timed out after 60s'
    assert ec2_client.describe_instances.call_count == 1


def test_region_resolution():
    assert AccountFetcher(MagicMock(region_name=None)).region == 'us-east-1'
    assert AccountFetcher(MagicMock(region_name='ap-south-1')).region == 'ap-south-1'
    settings = InventorySettings(region='eu-central-1')
    assert AccountFetcher(MagicMock(region_name='ap-south-1'), settings).region == 'eu-central-1'


def test_create_base_session_unknown_profile():
    with pytest.raises(ConfigError):
        create_base_session(profile='no-such-profile-for-tests')


@mock_aws
def test_fetch_with_moto():
    """End-to-end fetch against mocked STS and EC2"""
    ec2 = boto3.client('ec2', region_name='us-east-1')
    ec2.run_instances(
        ImageId=AMI_ID,
        MinCount=1,
        MaxCount=1,
        InstanceType='t3.micro',
        TagSpecifications=[{
            'ResourceType': 'instance',
            'Tags': [
                {'Key': 'Environment', 'Value': 'development'},
                {'Key': 'Name', 'Value': 'web1'}
            ]
        }]
    )
    ec2.run_instances(ImageId=AMI_ID, MinCount=2, MaxCount=2, InstanceType='m5.large')

    fetcher = AccountFetcher(create_base_session(region='us-east-1'))
    result = fetcher.fetch_account('123456789012', ROLE_ARN)

    assert result.succeeded
    assert len(result.records) == 3
    assert sorted((r.tag_name, r.instance_type) for r in result.records) == [
        ('-', 'm5.large'),
        ('-', 'm5.large'),
        ('web1', 't3.micro'),
    ]
    assert all(r.instance_id.startswith('i-') for r in result.records)
