"""In-memory stand-ins for the aiobotocore IAM/ECR clients used by the workflow."""

from contextlib import asynccontextmanager

from botocore.exceptions import ClientError


def client_error(code, message="simulated failure", operation="Operation"):
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class FakeAwsAccount:
    """Cloud-side state shared by every client a FakeSession hands out."""

    def __init__(self, account_id="665168932067", region_name="eu-north-1"):
        self.account_id = account_id
        self.region_name = region_name
        self.oidc_providers = {}
        self.roles = {}
        self.inline_policies = {}
        self.repositories = {}
        self.calls = []
        self.failures = {}
        self.side_effects = {}

    def fail(self, operation, code, message="simulated failure"):
        self.failures[operation] = client_error(code, message, operation)

    def record(self, operation):
        self.calls.append(operation)
        side_effect = self.side_effects.get(operation)
        if side_effect is not None:
            side_effect()
        error = self.failures.get(operation)
        if error is not None:
            raise error

    def resource_count(self):
        return len(self.oidc_providers) + len(self.roles) + len(self.inline_policies) + len(self.repositories)


class FakeIamClient:
    def __init__(self, account):
        self._account = account

    async def list_open_id_connect_providers(self):
        self._account.record("ListOpenIDConnectProviders")
        return {"OpenIDConnectProviderList": [{"Arn": arn} for arn in self._account.oidc_providers]}

    async def create_open_id_connect_provider(self, *, Url, ClientIDList, ThumbprintList):
        self._account.record("CreateOpenIDConnectProvider")
        host = Url.removeprefix("https://")
        arn = f"arn:aws:iam::{self._account.account_id}:oidc-provider/{host}"
        if arn in self._account.oidc_providers:
            raise client_error("EntityAlreadyExists", f"Provider with url {Url} already exists.")
        self._account.oidc_providers[arn] = {"ClientIDList": ClientIDList, "ThumbprintList": ThumbprintList}
        return {"OpenIDConnectProviderArn": arn}

    async def get_role(self, *, RoleName):
        self._account.record("GetRole")
        role = self._account.roles.get(RoleName)
        if role is None:
            raise client_error("NoSuchEntity", f"The role with name {RoleName} cannot be found.")
        return {"Role": role}

    async def create_role(self, *, RoleName, AssumeRolePolicyDocument, Description=""):
        self._account.record("CreateRole")
        if RoleName in self._account.roles:
            raise client_error("EntityAlreadyExists", f"Role with name {RoleName} already exists.")
        role = {
            "RoleName": RoleName,
            "Arn": f"arn:aws:iam::{self._account.account_id}:role/{RoleName}",
            "AssumeRolePolicyDocument": AssumeRolePolicyDocument,
        }
        self._account.roles[RoleName] = role
        return {"Role": role}

    async def put_role_policy(self, *, RoleName, PolicyName, PolicyDocument):
        self._account.record("PutRolePolicy")
        if RoleName not in self._account.roles:
            raise client_error("NoSuchEntity", f"The role with name {RoleName} cannot be found.")
        self._account.inline_policies[(RoleName, PolicyName)] = PolicyDocument
        return {}


class FakeEcrClient:
    def __init__(self, account):
        self._account = account

    def _repository(self, name):
        return {
            "repositoryName": name,
            "repositoryArn": f"arn:aws:ecr:{self._account.region_name}:{self._account.account_id}:repository/{name}",
        }

    async def describe_repositories(self, *, repositoryNames):
        self._account.record("DescribeRepositories")
        missing = [n for n in repositoryNames if n not in self._account.repositories]
        if missing:
            raise client_error("RepositoryNotFoundException", f"The repository '{missing[0]}' does not exist")
        return {"repositories": [self._account.repositories[n] for n in repositoryNames]}

    async def create_repository(self, *, repositoryName, **kwargs):
        self._account.record("CreateRepository")
        if repositoryName in self._account.repositories:
            raise client_error("RepositoryAlreadyExistsException", "The repository already exists")
        repository = self._repository(repositoryName)
        self._account.repositories[repositoryName] = repository
        return {"repository": repository}


class FakeSession:
    def __init__(self, account, credentials=object()):
        self.account = account
        self._credentials = credentials
        self.clients_created = []

    async def get_credentials(self):
        return self._credentials

    @asynccontextmanager
    async def _client(self, service_name):
        if service_name == "iam":
            yield FakeIamClient(self.account)
        elif service_name == "ecr":
            yield FakeEcrClient(self.account)
        else:
            raise AssertionError(f"unexpected client: {service_name}")

    def create_client(self, service_name, region_name=None, **kwargs):
        self.clients_created.append(service_name)
        return self._client(service_name)
