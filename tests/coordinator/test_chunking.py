"""Tests for chunk policies, smart externals and source discovery."""

import pytest

from buildplan.coordinator.chunking import (
    SeparatedChunkPolicy,
    UnifiedChunkPolicy,
    dependency_package,
    package_framework,
)
from buildplan.coordinator.discovery import discover_sources
from buildplan.coordinator.externals import declared_frameworks, is_external, smart_externals
from buildplan.core.fs import SourceIndex
from buildplan.scanner.types import DetectionStage, Framework, FrameworkInfo

DIRS = {"vue": "vue", "react": "react", "shared": "shared"}


class TestDependencyPackage:
    @pytest.mark.parametrize("module_id, expected", [
        ("/p/node_modules/vue/dist/vue.runtime.esm.js", "vue"),
        ("/p/node_modules/@vue/runtime-core/index.js", "@vue/runtime-core"),
        ("/p/node_modules/a/node_modules/@scope/b/x.js", "@scope/b"),
        ("C:\\p\\node_modules\\react\\index.js", "react"),
        ("\0/p/node_modules/react/index.js?commonjs-proxy", "react"),
        ("/p/src/Button.vue", None),
        ("/p/node_modules/@scope", None),
    ])
    def test_package_names(self, module_id, expected):
        assert dependency_package(module_id) == expected

    def test_package_framework(self):
        assert package_framework("@vue/shared") == "vue"
        assert package_framework("react-dom") == "react"
        assert package_framework("@angular/core") == "angular"
        assert package_framework("lodash") is None
        assert package_framework("vue-router") is None


class TestUnifiedChunkPolicy:
    def test_buckets_dependencies_only(self):
        policy = UnifiedChunkPolicy()
        assert policy("/p/node_modules/vue/index.js") == "vendor-vue"
        assert policy("/p/node_modules/react-dom/client.js") == "vendor-react"
        assert policy("/p/node_modules/lodash/map.js") == "vendor"
        assert policy("/p/src/Button.vue") is None


class TestSeparatedChunkPolicy:
    @pytest.fixture
    def files(self):
        return {
            "src/Button.vue": FrameworkInfo.of(Framework.VUE, 1.0, DetectionStage.EXTENSION),
            "src/Card.tsx": FrameworkInfo.of(Framework.REACT, 0.6, DetectionStage.IMPORTS),
            "src/List.jsx": FrameworkInfo.of(Framework.REACT, 0.6, DetectionStage.IMPORTS),
            "src/util.ts": FrameworkInfo.unknown(),
        }

    def test_vendor_directories(self, files):
        policy = SeparatedChunkPolicy(DIRS, files)
        assert policy.chunk_for("/p/node_modules/@vue/reactivity/index.js") == "vue/vendor"
        assert policy.chunk_for("/p/node_modules/react/index.js") == "react/vendor"
        assert policy.chunk_for("/p/node_modules/svelte/index.js") == "shared/vendor"
        assert policy.chunk_for("/p/node_modules/lodash/map.js") == "shared/vendor"
        assert policy.chunk_for("/p/src/util.ts") is None

    def test_shared_runtime(self, files):
        policy = SeparatedChunkPolicy(DIRS, files, shared_runtime=True)
        assert policy.chunk_for("/p/node_modules/vue/index.js") == "shared/vendor"

    def test_chunk_named_by_majority_framework(self, files):
        policy = SeparatedChunkPolicy(DIRS, files)
        assert policy.chunk_framework(["src/Button.vue", "src/Card.tsx", "src/List.jsx"]) == "react"
        assert policy.chunk_file_name(["src/Button.vue", "src/util.ts"]) == "vue/[name]-[hash].js"
        assert policy.chunk_file_name(["src/util.ts"]) == "shared/[name]-[hash].js"

    def test_majority_tie_uses_enumeration_order(self, files):
        policy = SeparatedChunkPolicy(DIRS, files)
        assert policy.chunk_framework(["src/Card.tsx", "src/Button.vue"]) == "vue"

    def test_custom_directories(self, files):
        policy = SeparatedChunkPolicy({"vue": "v", "shared": "common"}, files)
        assert policy.chunk_for("/p/node_modules/react/index.js") == "common/vendor"
        assert policy.chunk_for("/p/node_modules/vue/index.js") == "v/vendor"


class TestSmartExternals:
    def test_framework_without_files_is_externalized(self):
        externals = smart_externals({"vue": 3}, {"vue": "^3.4.0", "react": "^18.0.0"})
        assert externals == ["react", "react-dom", "react/*"]

    def test_vue_and_react_are_always_checked(self):
        externals = smart_externals({}, {})
        assert externals == ["vue", "@vue/*", "react", "react-dom", "react/*"]

    def test_declared_framework_runtime(self):
        externals = smart_externals({"vue": 1, "react": 1}, {"preact": "^10.0.0"})
        assert externals == ["preact", "preact/*"]

    def test_user_externals_come_first_and_dedupe(self):
        externals = smart_externals({"vue": 1}, {}, ["lodash", "react", "lodash"])
        assert externals == ["lodash", "react", "react-dom", "react/*"]

    def test_declared_frameworks(self):
        deps = {"@angular/core": "^17.0.0", "lit": "^3.0.0", "lodash": "^4.0.0"}
        assert declared_frameworks(deps) == ["lit", "angular"]

    def test_is_external(self):
        externals = ["vue", "@vue/*"]
        assert is_external("vue", externals)
        assert is_external("@vue/runtime-dom", externals)
        assert not is_external("vue-router", externals)


class TestDiscoverSources:
    def test_source_dirs_and_extensions(self, make_project):
        root = make_project({
            "src/App.vue": "",
            "src/main.ts": "",
            "src/types.d.ts": "",
            "src/App.test.tsx": "",
            "src/__tests__/helper.ts": "",
            "src/styles.css": "",
            "lib/legacy.js": "",
            "components/Card.svelte": "",
            "scripts/build.js": "",
        })
        files = discover_sources(SourceIndex.build(root))
        assert files == ["components/Card.svelte", "lib/legacy.js", "src/App.vue", "src/main.ts"]
