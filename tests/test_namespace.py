"""Tests for pregister.namespace — key derivation and key normalization."""

import pytest

from pregister.errors import EmptyNamespace
from pregister.namespace import camelize, file2namespace, split_namespace


class TestFile2Namespace:
    def test_mix_namespace_with_file(self) -> None:
        assert file2namespace("service/db/index.js", "service") == "service.db"
        assert file2namespace("service/db/index.js", "service.db") == "service.db"
        assert file2namespace("root/service/db/index.js", "service.db") == "service.db"
        assert file2namespace("root/service/db.js", "service.db") == "service.db"
        assert file2namespace("/root/service/db.js", "service.db") == "service.db"

    def test_index_at_namespace_root(self) -> None:
        assert file2namespace("service/index.py", "service") == "service"

    def test_bare_index(self) -> None:
        assert file2namespace("index.py", "service") == "service"

    def test_init_module_elided(self) -> None:
        assert file2namespace("lib/pkg/__init__.py", "plugins") == "plugins.lib.pkg"

    def test_prefix_prepended(self) -> None:
        assert file2namespace("handlers/send-mail.py", "jobs") == "jobs.handlers.send-mail"

    def test_shared_trailing_segment_not_duplicated(self) -> None:
        assert file2namespace("db/conn.py", "service.db") == "service.db.conn"
        assert file2namespace("db/pool/conn.py", "service.db") == "service.db.pool.conn"

    def test_shared_segments_compare_case_insensitively(self) -> None:
        assert file2namespace("DB/conn.py", "service.db") == "service.db.conn"

    def test_match_is_case_insensitive_and_keeps_canonical_case(self) -> None:
        assert file2namespace("Service/DB/index.py", "service.db") == "service.db"
        assert file2namespace("app/service/cache.py", "Service") == "Service.cache"

    def test_last_occurrence_wins(self) -> None:
        assert file2namespace("service/x/service/db.py", "service") == "service.db"

    def test_overlapping_occurrences_match_greedily(self) -> None:
        assert file2namespace("aaa/x.py", "aa") == "aa.x"

    def test_nested_remainder_kept(self) -> None:
        assert file2namespace("src/service/db/pool/conn.py", "service") == "service.db.pool.conn"

    def test_dots_collapsed(self) -> None:
        assert file2namespace("./service//db.py", "service") == "service.db"

    def test_file_without_extension(self) -> None:
        assert file2namespace("service/README", "service") == "service.README"

    def test_deterministic(self) -> None:
        first = file2namespace("root/service/db.py", "service.db")
        assert first == file2namespace("root/service/db.py", "service.db")

    @pytest.mark.parametrize(
        ("file", "namespace"),
        [
            ("service/db/index.js", "service"),
            ("root/service/db.js", "service.db"),
            ("db/conn.py", "service.db"),
            ("handlers/send-mail.py", "jobs"),
            ("service/index.py", "service"),
        ],
    )
    def test_idempotent_on_derived_keys(self, file: str, namespace: str) -> None:
        key = file2namespace(file, namespace)
        assert file2namespace(key, namespace) == key

    def test_module_suffix_stripped_from_key_like_name(self) -> None:
        assert file2namespace("db.py", "db") == "db"
        assert file2namespace("service.db.py", "service.db") == "service.db"

    def test_empty_namespace_raises(self) -> None:
        with pytest.raises(EmptyNamespace):
            file2namespace("service/db.py", "")


class TestCamelize:
    def test_hyphenated(self) -> None:
        assert camelize("my-module") == "myModule"

    def test_multiple_hyphens(self) -> None:
        assert camelize("send-mail-now") == "sendMailNow"

    def test_uppercase_after_hyphen_untouched(self) -> None:
        assert camelize("my-Module") == "my-Module"

    def test_digits_and_underscores_untouched(self) -> None:
        assert camelize("v-2") == "v-2"
        assert camelize("my_module") == "my_module"

    def test_already_camel(self) -> None:
        assert camelize("myModule") == "myModule"


class TestSplitNamespace:
    def test_path_and_leaf(self) -> None:
        assert split_namespace("a.b-c.my-module") == (["a", "b-c"], "myModule")

    def test_single_segment(self) -> None:
        assert split_namespace("db") == ([], "db")

    @pytest.mark.parametrize("namespace", ["", None])
    def test_empty(self, namespace: str | None) -> None:
        with pytest.raises(EmptyNamespace, match="can not be empty"):
            split_namespace(namespace)

    @pytest.mark.parametrize("namespace", ["a..b", ".a", "a."])
    def test_empty_segment(self, namespace: str) -> None:
        with pytest.raises(EmptyNamespace, match="empty segment"):
            split_namespace(namespace)
