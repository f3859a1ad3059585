"""Module for defining the Claude Server infrastructure using AWS CDK.

This module contains the CDK stack definition for a single public EC2
instance running code-server and Claude Code, reachable over HTTPS on a
custom domain in an existing Route 53 hosted zone.

TLS certificates are not managed here; Caddy on the instance obtains them
from Let's Encrypt.
"""

import aws_cdk as cdk
import aws_cdk.aws_ec2 as ec2
import aws_cdk.aws_iam as iam
import aws_cdk.aws_route53 as route53
from constructs import Construct

from claudeserver.schema import ClaudeServerConfig

from .user_data import bootstrap_commands

UBUNTU_AMI_PARAMETER = (
    "/aws/service/canonical/ubuntu/server/24.04/stable/current/{arch}/hvm/ebs-gp3/ami-id"
)


def ubuntu_ami_parameter(instance_type: ec2.InstanceType) -> str:
    """Canonical's public SSM parameter for the Ubuntu 24.04 AMI matching the type."""
    if instance_type.architecture == ec2.InstanceArchitecture.ARM_64:
        return UBUNTU_AMI_PARAMETER.format(arch="arm64")
    return UBUNTU_AMI_PARAMETER.format(arch="amd64")


class ClaudeServerStack(cdk.Stack):
    """CDK Stack for a remote development instance.

    Creates the network, instance, Elastic IP and DNS record.
    """

    def __init__(
        self,
        scope: Construct,
        id: str,
        config: ClaudeServerConfig,
        **kwargs,
    ) -> None:
        """Initialize the Claude Server stack.

        Args:
            scope: The parent construct.
            id: The construct ID.
            config: The validated deployment configuration.
            **kwargs: Additional keyword arguments passed to the parent Stack.
        """
        super().__init__(scope, id, **kwargs)

        self.config = config

        # Single AZ, public subnet only - the instance is reached directly
        self.vpc = ec2.Vpc(
            self,
            "Vpc",
            ip_addresses=ec2.IpAddresses.cidr("10.0.0.0/24"),
            max_azs=1,
            nat_gateways=0,
            subnet_configuration=[
                ec2.SubnetConfiguration(
                    name="Public",
                    subnet_type=ec2.SubnetType.PUBLIC,
                    cidr_mask=26,
                ),
            ],
        )

        self.security_group = ec2.SecurityGroup(
            self,
            "ServerSecurityGroup",
            vpc=self.vpc,
            description="Security group for the Claude Server instance",
            allow_all_outbound=True,
        )
        self.security_group.add_ingress_rule(
            ec2.Peer.any_ipv4(), ec2.Port.tcp(22), "SSH access"
        )
        # Port 80 is needed for the Let's Encrypt HTTP-01 challenge
        self.security_group.add_ingress_rule(
            ec2.Peer.any_ipv4(), ec2.Port.tcp(80), "HTTP (ACME challenge)"
        )
        self.security_group.add_ingress_rule(
            ec2.Peer.any_ipv4(), ec2.Port.tcp(443), "HTTPS access to code-server"
        )

        # IAM Role for the instance
        self.instance_role = iam.Role(
            self,
            "ServerInstanceRole",
            assumed_by=iam.ServicePrincipal("ec2.amazonaws.com"),
            managed_policies=[
                iam.ManagedPolicy.from_aws_managed_policy_name(
                    "AmazonSSMManagedInstanceCore"
                ),
            ],
        )

        # Read access to the code-server password only
        parameter_path = config.ssm_password_parameter_name.lstrip("/")
        self.instance_role.add_to_policy(
            iam.PolicyStatement(
                actions=["ssm:GetParameter"],
                resources=[
                    self.format_arn(
                        service="ssm",
                        resource="parameter",
                        resource_name=parameter_path,
                    )
                ],
            )
        )

        instance_type = ec2.InstanceType(config.instance_type)

        user_data = ec2.UserData.for_linux()
        user_data.add_commands(*bootstrap_commands(config))

        self.instance = ec2.Instance(
            self,
            "ServerInstance",
            vpc=self.vpc,
            vpc_subnets=ec2.SubnetSelection(subnet_type=ec2.SubnetType.PUBLIC),
            instance_type=instance_type,
            machine_image=ec2.MachineImage.from_ssm_parameter(
                ubuntu_ami_parameter(instance_type)
            ),
            key_pair=ec2.KeyPair.from_key_pair_name(
                self, "KeyPair", config.key_pair_name
            ),
            security_group=self.security_group,
            role=self.instance_role,
            user_data=user_data,
            block_devices=[
                ec2.BlockDevice(
                    device_name="/dev/sda1",
                    volume=ec2.BlockDeviceVolume.ebs(
                        config.volume_size,
                        volume_type=ec2.EbsDeviceVolumeType.GP3,
                        encrypted=True,
                        delete_on_termination=True,
                    ),
                )
            ],
            require_imdsv2=True,
        )

        # Elastic IP so the DNS record survives stop/start
        self.elastic_ip = ec2.CfnEIP(self, "ServerEip", domain="vpc")
        ec2.CfnEIPAssociation(
            self,
            "ServerEipAssociation",
            allocation_id=self.elastic_ip.attr_allocation_id,
            instance_id=self.instance.instance_id,
        )

        hosted_zone = route53.HostedZone.from_hosted_zone_attributes(
            self,
            "HostedZone",
            hosted_zone_id=config.hosted_zone_id,
            zone_name=config.zone_name,
        )

        route53.ARecord(
            self,
            "ServerARecord",
            zone=hosted_zone,
            record_name=config.domain,
            target=route53.RecordTarget.from_ip_addresses(
                self.elastic_ip.attr_public_ip
            ),
            ttl=cdk.Duration.minutes(5),
        )

        cdk.CfnOutput(
            self,
            "ClaudeServerInstanceId",
            value=self.instance.instance_id,
            description="EC2 instance ID of the Claude Server",
        )

        cdk.CfnOutput(
            self,
            "ClaudeServerPublicIp",
            value=self.elastic_ip.attr_public_ip,
            description="Elastic IP address of the Claude Server",
        )

        cdk.CfnOutput(
            self,
            "ClaudeServerUrl",
            value=config.url,
            description="code-server URL",
        )

        cdk.CfnOutput(
            self,
            "ClaudeServerSshCommand",
            value=f"ssh -i {config.key_pair_name}.pem ubuntu@{config.domain}",
            description="SSH command for the Claude Server",
        )

        cdk.CfnOutput(
            self,
            "ClaudeServerSsmSessionCommand",
            value=cdk.Fn.join(
                "",
                [
                    "aws ssm start-session --target ",
                    self.instance.instance_id,
                    f" --region {config.region}",
                ],
            ),
            description="Session Manager command for the Claude Server",
        )
