"""Detection patterns, weights and priorities for each candidate library type."""

from dataclasses import dataclass

from buildplan.detector.types import LibraryType


@dataclass(frozen=True)
class LibraryPattern:
    """Evidence sources examined for one candidate type.

    dependencies are the framework's core packages; dev_dependencies are
    ecosystem/tooling packages that count for less when matched alone.
    A dependency spec of the form ``name@N`` only matches major version N.
    """

    files: tuple[str, ...]
    dependencies: tuple[str, ...] = ()
    dev_dependencies: tuple[str, ...] = ()
    configs: tuple[str, ...] = ()
    manifest_fields: tuple[str, ...] = ()
    weight: float = 1.0
    # File globs only count once one of the packages above is declared
    requires_dependency: bool = False


LIBRARY_TYPE_PATTERNS: dict[LibraryType, LibraryPattern] = {
    LibraryType.TYPESCRIPT: LibraryPattern(
        files=("src/**/*.ts", "src/**/*.tsx", "lib/**/*.ts", "lib/**/*.tsx", "index.ts", "main.ts"),
        dependencies=("typescript", "@types/node"),
        configs=("tsconfig.json", "tsconfig.build.json"),
        manifest_fields=("types", "typings"),
        weight=1.0,
    ),
    # Only pure style libraries should match; see style suppression in the collectors.
    LibraryType.STYLE: LibraryPattern(
        files=(
            "src/**/*.css", "src/**/*.less", "src/**/*.scss", "src/**/*.sass",
            "src/**/*.styl", "lib/**/*.css", "styles/**/*",
        ),
        dependencies=("postcss",),
        configs=("postcss.config.js", ".stylelintrc"),
        manifest_fields=("style", "sass"),
        weight=0.3,
    ),
    LibraryType.VUE2: LibraryPattern(
        files=("src/**/*.vue", "lib/**/*.vue", "components/**/*.vue"),
        dependencies=("vue@2", "@vue/composition-api", "vue-template-compiler"),
        dev_dependencies=("@vue/cli-service", "vue-loader"),
        configs=("vue.config.js",),
        weight=0.95,
        requires_dependency=True,
    ),
    LibraryType.VUE3: LibraryPattern(
        files=(
            "src/**/*.vue", "lib/**/*.vue", "components/**/*.vue",
            "src/**/*.tsx", "lib/**/*.tsx", "components/**/*.tsx",
        ),
        dependencies=("vue@3", "@vue/runtime-core", "@vue/runtime-dom"),
        dev_dependencies=("@vitejs/plugin-vue", "@vue/compiler-sfc"),
        configs=("vite.config.ts", "vite.config.js"),
        weight=0.95,
        requires_dependency=True,
    ),
    LibraryType.REACT: LibraryPattern(
        files=("src/**/*.tsx", "src/**/*.jsx", "lib/**/*.tsx", "components/**/*.tsx"),
        dependencies=("react", "react-dom"),
        dev_dependencies=("@vitejs/plugin-react",),
        configs=("vite.config.ts", "vite.config.js"),
        weight=0.95,
        requires_dependency=True,
    ),
    LibraryType.SVELTE: LibraryPattern(
        files=("src/**/*.svelte", "lib/**/*.svelte", "components/**/*.svelte"),
        dependencies=("svelte",),
        dev_dependencies=("@sveltejs/rollup-plugin-svelte",),
        configs=("svelte.config.js", "svelte.config.cjs"),
        manifest_fields=("svelte",),
        weight=0.95,
        requires_dependency=True,
    ),
    LibraryType.SOLID: LibraryPattern(
        files=("src/**/*.jsx", "src/**/*.tsx"),
        dependencies=("solid-js",),
        dev_dependencies=("rollup-plugin-solid", "vite-plugin-solid"),
        configs=("vite.config.ts", "vite.config.js"),
        weight=0.9,
        requires_dependency=True,
    ),
    LibraryType.PREACT: LibraryPattern(
        files=("src/**/*.jsx", "src/**/*.tsx"),
        dependencies=("preact",),
        dev_dependencies=("@preact/preset-vite",),
        configs=("vite.config.ts", "vite.config.js"),
        weight=0.9,
        requires_dependency=True,
    ),
    LibraryType.LIT: LibraryPattern(
        files=("src/**/*.ts", "src/**/*.js", "src/**/*.css"),
        dependencies=("lit",),
        weight=0.85,
        requires_dependency=True,
    ),
    LibraryType.ANGULAR: LibraryPattern(
        files=("projects/**/*.ts", "src/**/*.ts"),
        dependencies=("@angular/core", "@angular/common"),
        dev_dependencies=("ng-packagr",),
        configs=("ng-package.json", "angular.json"),
        weight=0.8,
        requires_dependency=True,
    ),
    LibraryType.QWIK: LibraryPattern(
        files=("src/**/*.tsx", "src/**/*.ts"),
        dependencies=("@builder.io/qwik",),
        configs=("vite.config.ts",),
        weight=0.95,
        requires_dependency=True,
    ),
    # Generic fallback
    LibraryType.MIXED: LibraryPattern(
        files=("src/**/*.{ts,tsx,vue,css,less,scss,jsx,js}",),
        weight=0.85,
    ),
}

# Scores are multiplied by priority / 10 before normalization.
LIBRARY_TYPE_PRIORITY: dict[LibraryType, int] = {
    LibraryType.ENHANCED_MIXED: 11,
    LibraryType.VUE2: 10,
    LibraryType.VUE3: 10,
    LibraryType.REACT: 10,
    LibraryType.SVELTE: 9,
    LibraryType.SOLID: 9,
    LibraryType.PREACT: 9,
    LibraryType.QWIK: 9,
    LibraryType.LIT: 8,
    LibraryType.STYLE: 8,
    LibraryType.ANGULAR: 7,
    LibraryType.MIXED: 7,
    LibraryType.TYPESCRIPT: 5,
}

# Scored candidates in tie-break order (enhanced-mixed is never scored).
CANDIDATE_TYPES: tuple[LibraryType, ...] = tuple(
    t for t in LibraryType if t in LIBRARY_TYPE_PATTERNS
)

# Evidence multipliers per collector
FILE_COUNT_FACTOR = 0.08
ENTRY_FILE_BONUS = 0.1
DEPENDENCY_FACTOR = 0.8
DEV_ONLY_MULTIPLIER = 0.7
CONFIG_FACTOR = 0.6
MANIFEST_FIELD_FACTOR = 0.4

ENTRY_FILE_PREFIXES = ("index.", "main.")

# Style libraries need at least this many style files under src/
MIN_STYLE_FILES = 10

MIXED_CONFIDENCE = 0.95
FAILURE_CONFIDENCE = 0.1

# Fast path (b): JSX frameworks identified by a single marker dependency
JSX_MARKER_DEPENDENCIES: tuple[tuple[str, LibraryType], ...] = (
    ("solid-js", LibraryType.SOLID),
    ("@builder.io/qwik", LibraryType.QWIK),
)

SFC_GLOBS: dict[str, tuple[str, ...]] = {
    "vue": ("src/**/*.vue", "lib/**/*.vue", "components/**/*.vue"),
    "svelte": ("src/**/*.svelte", "lib/**/*.svelte", "components/**/*.svelte"),
}

SUPPORTED_VUE_MAJORS = (2, 3)
DEFAULT_VUE_MAJOR = 3


@dataclass(frozen=True)
class MixedFrameworkRule:
    """Evidence that a framework is really used by a multi-framework project.

    distinctive_files count on their own. backed_files only count when one of
    the framework's packages is declared, as does a raw score above the mixed
    threshold for any of scored_types.
    """

    framework: str
    dependencies: tuple[str, ...]
    scored_types: tuple[LibraryType, ...]
    distinctive_files: tuple[str, ...] = ()
    backed_files: tuple[str, ...] = ()
    requires_dependency: bool = False


MIXED_FRAMEWORK_RULES: tuple[MixedFrameworkRule, ...] = (
    MixedFrameworkRule(
        framework="vue",
        dependencies=("vue",),
        scored_types=(LibraryType.VUE2, LibraryType.VUE3),
        distinctive_files=("src/**/*.vue", "components/**/*.vue", "**/adapters/vue/**"),
        backed_files=("**/composables/**",),
    ),
    # Solid and Preact projects also ship .tsx files and hooks/ dirs
    MixedFrameworkRule(
        framework="react",
        dependencies=("react", "react-dom"),
        scored_types=(LibraryType.REACT,),
        distinctive_files=("**/adapters/react/**",),
        backed_files=("src/**/*.jsx", "src/**/*.tsx", "**/hooks/**"),
        requires_dependency=True,
    ),
    MixedFrameworkRule(
        framework="lit",
        dependencies=("lit",),
        scored_types=(LibraryType.LIT,),
        distinctive_files=("**/adapters/lit/**", "**/web-components/**"),
    ),
    MixedFrameworkRule(
        framework="svelte",
        dependencies=("svelte",),
        scored_types=(LibraryType.SVELTE,),
        distinctive_files=("src/**/*.svelte", "components/**/*.svelte", "**/adapters/svelte/**"),
    ),
    MixedFrameworkRule(
        framework="angular",
        dependencies=("@angular/core",),
        scored_types=(LibraryType.ANGULAR,),
        distinctive_files=("**/adapters/angular/**",),
    ),
    MixedFrameworkRule(
        framework="solid",
        dependencies=("solid-js",),
        scored_types=(LibraryType.SOLID,),
        distinctive_files=("**/adapters/solid/**",),
    ),
    MixedFrameworkRule(
        framework="preact",
        dependencies=("preact",),
        scored_types=(LibraryType.PREACT,),
        distinctive_files=("**/adapters/preact/**",),
    ),
)

MIXED_IGNORE = ("node_modules/**", "dist/**", "es/**", "lib/**", "**/*.test.*", "**/*.spec.*")
SFC_IGNORE = ("node_modules/**", "dist/**", "**/*.test.*", "**/*.spec.*")
