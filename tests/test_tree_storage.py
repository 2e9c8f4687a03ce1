import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch, MagicMock

from botocore.exceptions import ClientError, EndpointConnectionError, ReadTimeoutError

# Add the src directory to sys.path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src"))

from famtree.tree_config import Config
from famtree.tree_constants import RelationKind
from famtree.tree_codec import encode_tree
from famtree.tree_data_management import Tree
from famtree.tree_errors import CorruptData, InvalidInput, StoreIOError, StoreNotFound
from famtree.tree_storage import FileTreeStore, S3TreeStore, get_tree_store, serialize, deserialize


def build_tree() -> Tree:
    tree = Tree.create("Smiths", "Ann Smith", 1950)
    bob = tree.add_member("Bob Smith", 1975)
    bob.relate(RelationKind.PARENT, tree.root)
    tree.root.relate(RelationKind.CHILD, bob)
    return tree


class TestFileTreeStore(unittest.TestCase):

    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.base_dir = Path(tmp.name)
        self.store = FileTreeStore(self.base_dir)

    def test_store_and_load(self):
        self.store.store("smiths", b"payload")
        self.assertTrue((self.base_dir / "smiths.json").exists())
        self.assertEqual(self.store.load("smiths"), b"payload")
        self.assertEqual(self.store.load("smiths.json"), b"payload")

    def test_store_creates_directories(self):
        self.store.store("family/smiths.json", b"payload")
        self.assertEqual((self.base_dir / "family" / "smiths.json").read_bytes(), b"payload")

    def test_store_overwrites(self):
        self.store.store("smiths", b"old")
        self.store.store("smiths", b"new")
        self.assertEqual(self.store.load("smiths"), b"new")
        # no temporary files are left behind
        self.assertEqual([p.name for p in self.base_dir.iterdir()], ["smiths.json"])

    def test_load_missing(self):
        with self.assertRaises(StoreNotFound):
            self.store.load("missing")

    def test_empty_name(self):
        with self.assertRaises(InvalidInput):
            self.store.load("  ")
        with self.assertRaises(InvalidInput):
            self.store.store("", b"payload")

    def test_failed_write_keeps_previous_file(self):
        self.store.store("smiths", b"old")
        with patch("famtree.tree_storage.os.replace", side_effect=OSError("disk full")):
            with self.assertRaises(StoreIOError):
                self.store.store("smiths", b"new")
        self.assertEqual(self.store.load("smiths"), b"old")
        self.assertEqual([p.name for p in self.base_dir.iterdir()], ["smiths.json"])

    def test_load_os_error(self):
        (self.base_dir / "broken.json").mkdir()
        with self.assertRaises(StoreIOError):
            self.store.load("broken")


class TestSerialize(unittest.TestCase):

    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.store = FileTreeStore(tmp.name)

    def test_serialize_and_deserialize(self):
        tree = build_tree()
        serialize(self.store, "smiths", tree)
        self.assertEqual(self.store.load("smiths"), encode_tree(tree))

        loaded = deserialize(self.store, "smiths")
        self.assertIsNot(loaded, tree)
        parents = loaded.get_member("Bob Smith").related(RelationKind.PARENT)
        self.assertEqual([p.full_name for p in parents], ["Ann Smith"])

    def test_failed_save_leaves_tree_untouched(self):
        tree = build_tree()
        failing_store = MagicMock()
        failing_store.store.side_effect = StoreIOError("boom")
        before = encode_tree(tree)
        with self.assertRaises(StoreIOError):
            serialize(failing_store, "smiths", tree)
        self.assertEqual(encode_tree(tree), before)

    def test_deserialize_corrupt(self):
        self.store.store("smiths", b"{\"broken\": true}")
        with self.assertRaises(CorruptData):
            deserialize(self.store, "smiths")


class TestS3TreeStore(unittest.TestCase):

    def setUp(self):
        self.s3_client = MagicMock()
        self.store = S3TreeStore("test-bucket", prefix="trees/", s3_client=self.s3_client)

    def test_store(self):
        self.store.store("smiths", b"payload")
        self.s3_client.put_object.assert_called_once()
        kwargs = self.s3_client.put_object.call_args.kwargs
        self.assertEqual(kwargs["Bucket"], "test-bucket")
        self.assertEqual(kwargs["Key"], "trees/smiths.json")
        self.assertEqual(kwargs["Body"], b"payload")

    def test_load(self):
        body = MagicMock()
        body.read.return_value = b"payload"
        self.s3_client.get_object.return_value = {"Body": body}
        self.assertEqual(self.store.load("smiths.json"), b"payload")
        self.s3_client.get_object.assert_called_once_with(Bucket="test-bucket", Key="trees/smiths.json")

    def test_load_missing_key(self):
        self.s3_client.get_object.side_effect = ClientError(
            {"Error": {"Code": "NoSuchKey", "Message": "Not found"}}, "GetObject"
        )
        with self.assertRaises(StoreNotFound):
            self.store.load("smiths")

    def test_load_other_client_error(self):
        self.s3_client.get_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "Denied"}}, "GetObject"
        )
        with self.assertRaises(StoreIOError):
            self.store.load("smiths")

    def test_store_client_error(self):
        self.s3_client.put_object.side_effect = ClientError(
            {"Error": {"Code": "InternalError", "Message": "Oops"}}, "PutObject"
        )
        with self.assertRaises(StoreIOError):
            self.store.store("smiths", b"payload")

    def test_load_connection_error(self):
        self.s3_client.get_object.side_effect = EndpointConnectionError(endpoint_url="https://s3.example")
        with self.assertRaises(StoreIOError) as ctx:
            self.store.load("smiths")
        self.assertIsNotNone(ctx.exception.recovery_suggestion)

    def test_load_body_read_timeout(self):
        body = MagicMock()
        body.read.side_effect = ReadTimeoutError(endpoint_url="https://s3.example")
        self.s3_client.get_object.return_value = {"Body": body}
        with self.assertRaises(StoreIOError):
            self.store.load("smiths")

    def test_store_connection_error(self):
        self.s3_client.put_object.side_effect = EndpointConnectionError(endpoint_url="https://s3.example")
        with self.assertRaises(StoreIOError):
            self.store.store("smiths", b"payload")

    def test_bucket_required(self):
        with self.assertRaises(InvalidInput):
            S3TreeStore("", s3_client=self.s3_client)


class TestGetTreeStore(unittest.TestCase):

    def test_file_store_by_default(self):
        cfg = Config()
        cfg.S3_BUCKET = ""
        cfg.DATA_DIR = "/tmp/famtree-test"
        store = get_tree_store(cfg)
        self.assertIsInstance(store, FileTreeStore)
        self.assertEqual(store.base_dir, Path("/tmp/famtree-test"))

    @patch("famtree.tree_storage.boto3.client")
    def test_s3_store_when_bucket_configured(self, mock_boto_client):
        mock_boto_client.return_value = MagicMock()
        cfg = Config()
        cfg.S3_BUCKET = "test-bucket"
        cfg.S3_PREFIX = "trees/"
        cfg.S3_REGION = "eu-west-1"
        cfg.S3_ENDPOINT_URL = None
        store = get_tree_store(cfg)
        self.assertIsInstance(store, S3TreeStore)
        self.assertEqual(store.bucket, "test-bucket")
        mock_boto_client.assert_called_once_with('s3', region_name="eu-west-1", endpoint_url=None)


if __name__ == '__main__':
    unittest.main()
