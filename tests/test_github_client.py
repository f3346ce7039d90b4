import sys
import unittest
from pathlib import Path

import httpx

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))
sys.path.append(str(Path(__file__).resolve().parent))

from upstream import API, CONTENTS, RAW, FakeGithub, file_entry

from workflow_gallery.config import Settings
from workflow_gallery.connectors import close_connector, create_github_client
from workflow_gallery.connectors.github import GithubClient
from workflow_gallery.errors import ShapeError, TransportError, UpstreamStatusError


class GithubClientTests(unittest.IsolatedAsyncioTestCase):
    async def test_sends_user_agent_and_no_credentials_by_default(self):
        fake = FakeGithub({f"{CONTENTS}/workflows": [file_entry("workflows/a.json")]})
        client = fake.client()

        listing = await client.list_directory("workflows")

        self.assertEqual(len(listing), 1)
        request = fake.requests[0]
        self.assertEqual(request.headers["User-Agent"], "n8n-workflow-gallery")
        self.assertEqual(request.headers["Accept"], "application/vnd.github+json")
        self.assertNotIn("Authorization", request.headers)
        await close_connector(client)

    async def test_sends_bearer_token_when_configured(self):
        fake = FakeGithub({f"{RAW}/a.json": {"nodes": []}})
        client = fake.client(token="ghp_secret")

        await client.fetch_document(f"{RAW}/a.json")

        self.assertEqual(fake.requests[0].headers["Authorization"], "Bearer ghp_secret")
        self.assertTrue(client.has_token)

    async def test_bearer_token_only_goes_to_github_hosts(self):
        fake = FakeGithub({
            API: {"name": "flows"},
            "https://cdn.example.net/flows/a.json": {"nodes": []},
        })
        client = fake.client(token="ghp_secret")

        await client.fetch_repository()
        await client.fetch_document("https://cdn.example.net/flows/a.json")

        api_request, foreign_request = fake.requests
        self.assertEqual(api_request.headers["Authorization"], "Bearer ghp_secret")
        self.assertNotIn("Authorization", foreign_request.headers)
        self.assertFalse(client.is_trusted("https://cdn.example.net/flows/a.json"))
        self.assertTrue(client.is_trusted(f"{RAW}/a.json"))

    async def test_non_2xx_raises_upstream_status_error(self):
        fake = FakeGithub({API: httpx.Response(403, text="rate limited")})
        client = fake.client()

        with self.assertRaises(UpstreamStatusError) as ctx:
            await client.fetch_repository()

        self.assertEqual(ctx.exception.status, 403)
        self.assertEqual(ctx.exception.body, "rate limited")
        self.assertFalse(ctx.exception.is_not_found)

    async def test_missing_path_is_a_404_status_error(self):
        client = FakeGithub().client()
        with self.assertRaises(UpstreamStatusError) as ctx:
            await client.list_directory("nope")
        self.assertTrue(ctx.exception.is_not_found)

    async def test_network_failure_raises_transport_error(self):
        fake = FakeGithub({f"{CONTENTS}/workflows": httpx.ConnectError("connection refused")})
        client = fake.client()

        with self.assertRaises(TransportError):
            await client.list_directory("workflows")

    async def test_timeout_raises_transport_error(self):
        fake = FakeGithub({f"{RAW}/slow.json": httpx.ReadTimeout("timed out")})
        client = fake.client()

        with self.assertRaises(TransportError):
            await client.fetch_document(f"{RAW}/slow.json")

    async def test_invalid_json_raises_shape_error(self):
        fake = FakeGithub({f"{RAW}/broken.json": httpx.Response(200, text="{not json")})
        client = fake.client()

        with self.assertRaises(ShapeError):
            await client.fetch_document(f"{RAW}/broken.json")

    async def test_listing_a_file_is_a_shape_error(self):
        fake = FakeGithub({f"{CONTENTS}/README.md": file_entry("README.md")})
        client = fake.client()

        with self.assertRaises(ShapeError):
            await client.list_directory("README.md")


class GithubUrlTests(unittest.TestCase):
    def test_urls(self):
        client = GithubClient("acme", "flows", httpx.AsyncClient(), branch="dev")
        self.assertEqual(client.repo_url(), API)
        self.assertEqual(client.contents_url(), CONTENTS)
        self.assertEqual(client.contents_url("/workflows/"), f"{CONTENTS}/workflows")
        self.assertEqual(
            client.raw_url("data/index.json"),
            "https://raw.githubusercontent.com/acme/flows/dev/data/index.json",
        )

    def test_created_from_settings(self):
        settings = Settings(github_owner="acme", github_repo="flows", github_token="t", content_timeout=2.5)
        client = create_github_client(settings)
        self.assertEqual(client.repository, "acme/flows")
        self.assertEqual(client.content_timeout, 2.5)
        self.assertTrue(GithubClient.is_configured(settings))


if __name__ == "__main__":
    unittest.main()
