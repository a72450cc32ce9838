"""
Resource enumerators for each supported kind.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import quote

from resource_picker.config.manager import create_aws_session
from resource_picker.models.resource import Resource, ResourceKind
from resource_picker.services.auth import SSOAuthenticator
from resource_picker.services.loader import LoadOptions, ResourceLoader, ResourceLoaderDefinition


def _tag_value(tags: Optional[List[Dict[str, str]]], key: str) -> str:
    for tag in tags or []:
        if tag.get('Key') == key:
            return tag.get('Value', '')
    return ''


class BotoResourceDefinition(ResourceLoaderDefinition[Any, Dict[str, Any]]):
    """Definition backed by a boto3 client for ``service_name``."""

    def init(self, options: LoadOptions) -> Any:
        session = create_aws_session(options.profile, options.region)
        return session.client(self.service_name)


class BucketDefinition(BotoResourceDefinition):
    service_name = 's3'
    operation_name = 'list_buckets'

    def enumerate(self, client, options):
        response = client.list_buckets()
        yield from response.get('Buckets', [])

    def map(self, bucket, region):
        name = bucket.get('Name') or 'Unknown'
        return Resource(
            name=name,
            description='',
            url=f"https://s3.console.aws.amazon.com/s3/buckets/{name}?region={region}&tab=objects",
        )


class ClusterDefinition(BotoResourceDefinition):
    service_name = 'ecs'
    operation_name = 'list_clusters'

    def enumerate(self, client, options):
        next_token = None
        while True:
            params = {}
            if next_token:
                params['nextToken'] = next_token

            response = client.list_clusters(**params)
            cluster_arns = response.get('clusterArns', [])

            # DescribeClusters accepts at most 100 clusters per call
            for i in range(0, len(cluster_arns), 100):
                described = client.describe_clusters(clusters=cluster_arns[i:i + 100])
                yield from described.get('clusters', [])

            next_token = response.get('nextToken')
            if not next_token:
                break

    def map(self, cluster, region):
        name = cluster.get('clusterName') or 'Unknown'
        return Resource(
            name=name,
            description=f"{cluster.get('runningTasksCount', 0)} running tasks",
            url=f"https://{region}.console.aws.amazon.com/ecs/v2/clusters/{name}/services?region={region}",
            arn=cluster.get('clusterArn'),
        )


class DatabaseDefinition(BotoResourceDefinition):
    service_name = 'rds'
    operation_name = 'describe_db_instances'

    def enumerate(self, client, options):
        marker = None
        while True:
            params = {}
            if marker:
                params['Marker'] = marker

            response = client.describe_db_instances(**params)
            yield from response.get('DBInstances', [])

            marker = response.get('Marker')
            if not marker:
                break

    def map(self, db, region):
        identifier = db.get('DBInstanceIdentifier') or 'Unknown'
        return Resource(
            name=identifier,
            description=f"{db.get('DBInstanceStatus')}, {db.get('Engine')} ({db.get('EngineVersion')})",
            url=(f"https://{region}.console.aws.amazon.com/rds/home?region={region}"
                 f"#database:id={identifier};is-cluster=false"),
            arn=db.get('DBInstanceArn'),
        )


class DistributionDefinition(BotoResourceDefinition):
    service_name = 'cloudfront'
    operation_name = 'list_distributions'

    def enumerate(self, client, options):
        marker = None
        while True:
            params = {}
            if marker:
                params['Marker'] = marker

            response = client.list_distributions(**params)
            distribution_list = response.get('DistributionList', {})
            yield from distribution_list.get('Items', [])

            marker = distribution_list.get('NextMarker')
            if not distribution_list.get('IsTruncated') or not marker:
                break

    def map(self, distribution, region):
        distribution_id = distribution.get('Id', '')
        return Resource(
            name=distribution.get('Comment') or distribution_id,
            description=f"{distribution.get('DomainName')} ({distribution_id})",
            url=(f"https://us-east-1.console.aws.amazon.com/cloudfront/v4/home?region={region}"
                 f"#/distributions/{distribution_id}"),
            arn=distribution.get('ARN'),
        )


class FunctionDefinition(BotoResourceDefinition):
    service_name = 'lambda'
    operation_name = 'list_functions'

    def enumerate(self, client, options):
        marker = None
        while True:
            params = {}
            if marker:
                params['Marker'] = marker

            response = client.list_functions(**params)
            yield from response.get('Functions', [])

            marker = response.get('NextMarker')
            if not marker:
                break

    def map(self, function, region):
        name = function.get('FunctionName') or 'Unknown'
        return Resource(
            name=name,
            description=function.get('Runtime') or '',
            url=f"https://{region}.console.aws.amazon.com/lambda/home?region={region}#/functions/{name}?tab=code",
            arn=function.get('FunctionArn'),
        )


class HostedZoneDefinition(BotoResourceDefinition):
    service_name = 'route53'
    operation_name = 'list_hosted_zones'

    def enumerate(self, client, options):
        marker = None
        while True:
            params = {}
            if marker:
                params['Marker'] = marker

            response = client.list_hosted_zones(**params)
            yield from response.get('HostedZones', [])

            marker = response.get('NextMarker')
            if not response.get('IsTruncated') or not marker:
                break

    def map(self, zone, region):
        zone_id = (zone.get('Id') or '').replace('/hostedzone/', '')
        return Resource(
            name=zone.get('Name') or zone_id or 'Unknown',
            description=zone_id if zone.get('Name') else '',
            url=f"https://us-east-1.console.aws.amazon.com/route53/v2/hostedzones#ListRecordSets/{zone_id}",
        )


class InstanceDefinition(BotoResourceDefinition):
    service_name = 'ec2'
    operation_name = 'describe_instances'

    def enumerate(self, client, options):
        next_token = None
        while True:
            params = {}
            if next_token:
                params['NextToken'] = next_token

            response = client.describe_instances(**params)
            for reservation in response.get('Reservations', []):
                yield from reservation.get('Instances', [])

            next_token = response.get('NextToken')
            if not next_token:
                break

    def map(self, instance, region):
        instance_id = instance.get('InstanceId', '')
        state = instance.get('State', {}).get('Name')
        return Resource(
            name=_tag_value(instance.get('Tags'), 'Name'),
            description=f"{instance_id}, {state}, {instance.get('InstanceType')}",
            url=(f"https://{region}.console.aws.amazon.com/ec2/v2/home?region={region}"
                 f"#InstanceDetails:instanceId={instance_id}"),
        )


class LogGroupDefinition(BotoResourceDefinition):
    service_name = 'logs'
    operation_name = 'describe_log_groups'

    def enumerate(self, client, options):
        next_token = None
        while True:
            params = {}
            if next_token:
                params['nextToken'] = next_token

            response = client.describe_log_groups(**params)
            yield from response.get('logGroups', [])

            next_token = response.get('nextToken')
            if not next_token:
                break

    def map(self, log_group, region):
        name = log_group.get('logGroupName') or 'Unknown'
        # The console double-encodes slashes in log group names
        escaped_name = name.replace('/', '$252F')
        return Resource(
            name=name,
            description='',
            url=(f"https://{region}.console.aws.amazon.com/cloudwatch/home?region={region}"
                 f"#logsV2:log-groups/log-group/{escaped_name}/log-events"),
            arn=log_group.get('arn'),
        )


class ParameterDefinition(BotoResourceDefinition):
    service_name = 'ssm'
    operation_name = 'describe_parameters'

    def enumerate(self, client, options):
        next_token = None
        while True:
            params = {}
            if next_token:
                params['NextToken'] = next_token

            response = client.describe_parameters(**params)
            yield from response.get('Parameters', [])

            next_token = response.get('NextToken')
            if not next_token:
                break

    def map(self, parameter, region):
        name = parameter.get('Name') or 'Unknown'
        path = name if name.startswith('/') else f"/{name}"
        return Resource(
            name=name,
            description=parameter.get('Type', ''),
            url=(f"https://{region}.console.aws.amazon.com/systems-manager/parameters{path}"
                 f"/description?region={region}&tab=Table"),
            arn=parameter.get('ARN'),
        )


class SecretDefinition(BotoResourceDefinition):
    service_name = 'secretsmanager'
    operation_name = 'list_secrets'

    def enumerate(self, client, options):
        next_token = None
        while True:
            params = {}
            if next_token:
                params['NextToken'] = next_token

            response = client.list_secrets(**params)
            yield from response.get('SecretList', [])

            next_token = response.get('NextToken')
            if not next_token:
                break

    def map(self, secret, region):
        name = secret.get('Name') or 'Unknown'
        return Resource(
            name=name,
            description=secret.get('Description') or '',
            url=f"https://{region}.console.aws.amazon.com/secretsmanager/secret?name={quote(name, safe='')}&region={region}",
            arn=secret.get('ARN'),
        )


class StackDefinition(BotoResourceDefinition):
    service_name = 'cloudformation'
    operation_name = 'list_stacks'

    def enumerate(self, client, options):
        next_token = None
        while True:
            params = {}
            if next_token:
                params['NextToken'] = next_token

            response = client.list_stacks(**params)
            for summary in response.get('StackSummaries', []):
                if summary.get('StackStatus') != 'DELETE_COMPLETE':
                    yield summary

            next_token = response.get('NextToken')
            if not next_token:
                break

    def map(self, stack, region):
        name = stack.get('StackName') or 'Unknown'
        status = stack.get('StackStatus', '')
        marker = '~ ' if 'IN_PROGRESS' in status else ''
        return Resource(
            name=name,
            description=f"{marker}{status}",
            url=(f"https://{region}.console.aws.amazon.com/cloudformation/home?region={region}"
                 f"#/stacks/stackinfo?stackId={quote(stack.get('StackId', ''), safe='')}"),
            arn=stack.get('StackId'),
        )


class TableDefinition(BotoResourceDefinition):
    service_name = 'dynamodb'
    operation_name = 'list_tables'

    def enumerate(self, client, options):
        last_table_name = None
        while True:
            params = {}
            if last_table_name:
                params['ExclusiveStartTableName'] = last_table_name

            response = client.list_tables(**params)
            yield from response.get('TableNames', [])

            last_table_name = response.get('LastEvaluatedTableName')
            if not last_table_name:
                break

    def map(self, table_name, region):
        return Resource(
            name=table_name,
            description='',
            url=(f"https://{region}.console.aws.amazon.com/dynamodbv2/home?region={region}"
                 f"#item-explorer?maximize=true&table={table_name}"),
        )


class AutoScalingGroupDefinition(BotoResourceDefinition):
    service_name = 'autoscaling'
    operation_name = 'describe_auto_scaling_groups'

    def enumerate(self, client, options):
        next_token = None
        while True:
            params = {}
            if next_token:
                params['NextToken'] = next_token

            response = client.describe_auto_scaling_groups(**params)
            yield from response.get('AutoScalingGroups', [])

            next_token = response.get('NextToken')
            if not next_token:
                break

    def map(self, group, region):
        name = group.get('AutoScalingGroupName') or ''
        size = len(group.get('Instances', []))
        return Resource(
            name=name,
            description=(f"{size} (min={group.get('MinSize')}, desired={group.get('DesiredCapacity')}, "
                         f"max={group.get('MaxSize')})"),
            url=(f"https://{region}.console.aws.amazon.com/ec2autoscaling/home?region={region}"
                 f"#/details/{name}?view=details"),
            arn=group.get('AutoScalingGroupARN'),
        )


REGIONS = [
    ('us-east-2', 'US East (Ohio)'),
    ('us-east-1', 'US East (N. Virginia)'),
    ('us-west-1', 'US West (N. California)'),
    ('us-west-2', 'US West (Oregon)'),
    ('af-south-1', 'Africa (Cape Town)'),
    ('ap-east-1', 'Asia Pacific (Hong Kong)'),
    ('ap-southeast-3', 'Asia Pacific (Jakarta)'),
    ('ap-south-1', 'Asia Pacific (Mumbai)'),
    ('ap-northeast-3', 'Asia Pacific (Osaka)'),
    ('ap-northeast-2', 'Asia Pacific (Seoul)'),
    ('ap-southeast-1', 'Asia Pacific (Singapore)'),
    ('ap-southeast-2', 'Asia Pacific (Sydney)'),
    ('ap-northeast-1', 'Asia Pacific (Tokyo)'),
    ('ca-central-1', 'Canada (Central)'),
    ('eu-central-1', 'Europe (Frankfurt)'),
    ('eu-west-1', 'Europe (Ireland)'),
    ('eu-west-2', 'Europe (London)'),
    ('eu-south-1', 'Europe (Milan)'),
    ('eu-west-3', 'Europe (Paris)'),
    ('eu-north-1', 'Europe (Stockholm)'),
    ('me-south-1', 'Middle East (Bahrain)'),
    ('me-central-1', 'Middle East (UAE)'),
    ('sa-east-1', 'South America (São Paulo)'),
]


class RegionDefinition(ResourceLoaderDefinition[None, tuple]):
    """Static catalogue of regions; needs no remote client."""

    service_name = 'catalogue'
    operation_name = 'regions'

    def init(self, options):
        return None

    def enumerate(self, client, options):
        return iter(REGIONS)

    def map(self, region_entry, region):
        region_id, region_name = region_entry
        return Resource(
            name=region_name,
            description=region_id,
            url=region_url(region_id),
        )


def region_url(region_id: str) -> str:
    """Console home page of a region; also the identity of its picker entry."""
    return f"https://{region_id}.console.aws.amazon.com/console/home?region={region_id}"


def region_id_of(resource: Resource) -> str:
    """Region id of a resource produced by ``RegionDefinition``."""
    return resource.description


DEFINITIONS: Dict[ResourceKind, ResourceLoaderDefinition] = {
    ResourceKind.AUTO_SCALING_GROUP: AutoScalingGroupDefinition(),
    ResourceKind.BUCKET: BucketDefinition(),
    ResourceKind.CLUSTER: ClusterDefinition(),
    ResourceKind.DATABASE: DatabaseDefinition(),
    ResourceKind.DISTRIBUTION: DistributionDefinition(),
    ResourceKind.FUNCTION: FunctionDefinition(),
    ResourceKind.HOSTED_ZONE: HostedZoneDefinition(),
    ResourceKind.INSTANCE: InstanceDefinition(),
    ResourceKind.LOG_GROUP: LogGroupDefinition(),
    ResourceKind.PARAMETER: ParameterDefinition(),
    ResourceKind.REGION: RegionDefinition(),
    ResourceKind.SECRET: SecretDefinition(),
    ResourceKind.STACK: StackDefinition(),
    ResourceKind.TABLE: TableDefinition(),
}


def build_loader(kind: ResourceKind, authenticator: Optional[SSOAuthenticator] = None) -> ResourceLoader:
    """Create a loader, with its own cache, for a resource kind."""
    return ResourceLoader(DEFINITIONS[kind], authenticator=authenticator)
