"""Library catalog: every third-party dependency of the FFmpeg build.

Declaration order follows the curated build order; ``requires`` is what the
pipeline actually sorts on.
"""

from __future__ import annotations

from collections.abc import Mapping

from .config import DEFAULT_VERSIONS
from .models import LATEST, LibraryDescriptor
from .patches import SourcePatch

X264_REPO = "https://code.videolan.org/videolan/x264.git"

X265_CMAKE_PATCH = SourcePatch(
    path="source/CMakeLists.txt",
    drop_lines_containing=(
        "cmake_policy(SET CMP0025 OLD)",
        "cmake_policy(SET CMP0054 OLD)",
    ),
    substitutions=(
        (r"cmake_minimum_required\s*\(VERSION 2\.[0-9.]*\)", "cmake_minimum_required(VERSION 3.5)"),
    ),
)

VORBIS_CONFIGURE_PATCH = SourcePatch(
    path="configure",
    substitutions=((r"-force_cpusubtype_ALL", ""),),
)

_AOM_X86_SIMD = (
    "-DENABLE_NEON=OFF",
    "-DENABLE_SSE=ON",
    "-DENABLE_SSE2=ON",
    "-DENABLE_SSE3=ON",
    "-DENABLE_SSSE3=ON",
    "-DENABLE_SSE4_1=ON",
    "-DENABLE_SSE4_2=ON",
    "-DENABLE_AVX=ON",
    "-DENABLE_AVX2=ON",
)

_XIPH = "https://downloads.xiph.org/releases"

_LIBRARIES: tuple[LibraryDescriptor, ...] = (
    # Foundation libraries.
    LibraryDescriptor(
        name="zlib",
        version=DEFAULT_VERSIONS["ZLIB_VERSION"],
        version_env="ZLIB_VERSION",
        url="https://github.com/madler/zlib/releases/download/v{version}/zlib-{version}.tar.gz",
        archive="zlib-{version}.tar.gz",
        build_system="autotools",
        static_flags=("--static",),
        host_flag=False,
    ),
    LibraryDescriptor(
        name="brotli",
        version=DEFAULT_VERSIONS["BROTLI_VERSION"],
        version_env="BROTLI_VERSION",
        url="https://github.com/google/brotli/archive/v{version}.tar.gz",
        archive="brotli-{version}.tar.gz",
        build_system="cmake",
    ),
    LibraryDescriptor(
        name="libogg",
        version=DEFAULT_VERSIONS["OGG_VERSION"],
        version_env="OGG_VERSION",
        url=_XIPH + "/ogg/libogg-{version}.tar.gz",
        archive="libogg-{version}.tar.gz",
        build_system="autotools",
    ),
    LibraryDescriptor(
        name="fribidi",
        version=DEFAULT_VERSIONS["FRIBIDI_VERSION"],
        version_env="FRIBIDI_VERSION",
        url="https://github.com/fribidi/fribidi/releases/download/v{version}/fribidi-{version}.tar.xz",
        archive="fribidi-{version}.tar.xz",
        build_system="autotools",
    ),
    LibraryDescriptor(
        name="libunibreak",
        version=DEFAULT_VERSIONS["LIBUNIBREAK_VERSION"],
        version_env="LIBUNIBREAK_VERSION",
        url=(
            "https://github.com/adah1972/libunibreak/releases/download/"
            "libunibreak_{version_underscored}/libunibreak-{version}.tar.gz"
        ),
        archive="libunibreak-{version}.tar.gz",
        build_system="autotools",
    ),
    LibraryDescriptor(
        name="freetype",
        version=DEFAULT_VERSIONS["FREETYPE_VERSION"],
        version_env="FREETYPE_VERSION",
        url="https://download.savannah.gnu.org/releases/freetype/freetype-{version}.tar.xz",
        archive="freetype-{version}.tar.xz",
        build_system="autotools",
        requires=("zlib", "brotli"),
        configure_args=(
            "--without-harfbuzz",
            "--without-bzip2",
            "--without-png",
            "--with-zlib=yes",
            "--with-brotli=yes",
        ),
        ffmpeg_flags=("--enable-libfreetype",),
    ),
    LibraryDescriptor(
        name="harfbuzz",
        version=DEFAULT_VERSIONS["HARFBUZZ_VERSION"],
        version_env="HARFBUZZ_VERSION",
        url="https://github.com/harfbuzz/harfbuzz/releases/download/{version}/harfbuzz-{version}.tar.xz",
        archive="harfbuzz-{version}.tar.xz",
        build_system="meson",
        requires=("freetype", "fribidi"),
        configure_args=(
            "-Dtests=disabled",
            "-Ddocs=disabled",
            "-Dbenchmark=disabled",
            "-Dcairo=disabled",
            "-Dicu=disabled",
            "-Dglib=disabled",
            "-Dgobject=disabled",
        ),
    ),
    # Libraries that depend on libogg and freetype.
    LibraryDescriptor(
        name="libvorbis",
        version=DEFAULT_VERSIONS["VORBIS_VERSION"],
        version_env="VORBIS_VERSION",
        url=_XIPH + "/vorbis/libvorbis-{version}.tar.gz",
        archive="libvorbis-{version}.tar.gz",
        build_system="autotools",
        requires=("libogg",),
        patches=(VORBIS_CONFIGURE_PATCH,),
        ffmpeg_flags=("--enable-libvorbis",),
    ),
    LibraryDescriptor(
        name="libtheora",
        version=DEFAULT_VERSIONS["THEORA_VERSION"],
        version_env="THEORA_VERSION",
        url=_XIPH + "/theora/libtheora-{version}.tar.gz",
        archive="libtheora-{version}.tar.gz",
        build_system="autotools",
        requires=("libogg",),
        configure_args=("--disable-examples",),
        ffmpeg_flags=("--enable-libtheora",),
    ),
    LibraryDescriptor(
        name="fontconfig",
        version=DEFAULT_VERSIONS["FONTCONFIG_VERSION"],
        version_env="FONTCONFIG_VERSION",
        url="https://www.freedesktop.org/software/fontconfig/release/fontconfig-{version}.tar.xz",
        archive="fontconfig-{version}.tar.xz",
        build_system="autotools",
        requires=("freetype",),
        configure_args=("--enable-libxml2=no",),
        ffmpeg_flags=("--enable-fontconfig",),
    ),
    # Audio codecs.
    LibraryDescriptor(
        name="opus",
        version=DEFAULT_VERSIONS["OPUS_VERSION"],
        version_env="OPUS_VERSION",
        url=_XIPH + "/opus/opus-{version}.tar.gz",
        archive="opus-{version}.tar.gz",
        build_system="autotools",
        ffmpeg_flags=("--enable-libopus",),
    ),
    LibraryDescriptor(
        name="lame",
        version=DEFAULT_VERSIONS["LAME_VERSION"],
        version_env="LAME_VERSION",
        url="https://downloads.sourceforge.net/project/lame/lame/{version}/lame-{version}.tar.gz",
        archive="lame-{version}.tar.gz",
        build_system="autotools",
        configure_args=("--disable-frontend",),
        ffmpeg_flags=("--enable-libmp3lame",),
    ),
    LibraryDescriptor(
        name="fdk-aac",
        version=DEFAULT_VERSIONS["FDK_AAC_VERSION"],
        version_env="FDK_AAC_VERSION",
        url="https://github.com/mstorsjo/fdk-aac/archive/v{version}.tar.gz",
        archive="fdk-aac-{version}.tar.gz",
        build_system="autotools",
        pre_configure=(("autoreconf", "-fiv"),),
        ffmpeg_flags=("--enable-libfdk-aac",),
    ),
    LibraryDescriptor(
        name="speex",
        version=DEFAULT_VERSIONS["SPEEX_VERSION"],
        version_env="SPEEX_VERSION",
        url=_XIPH + "/speex/speex-{version}.tar.gz",
        archive="speex-{version}.tar.gz",
        build_system="autotools",
        ffmpeg_flags=("--enable-libspeex",),
    ),
    LibraryDescriptor(
        name="soxr",
        version=DEFAULT_VERSIONS["SOXR_VERSION"],
        version_env="SOXR_VERSION",
        url="https://sourceforge.net/projects/soxr/files/soxr-{version}-Source.tar.xz",
        archive="soxr-{version}-Source.tar.xz",
        source_dir="soxr-{version}-Source",
        build_system="cmake",
        configure_args=("-DBUILD_TESTS=OFF", "-DWITH_OPENMP=OFF"),
        ffmpeg_flags=("--enable-libsoxr",),
    ),
    # Video codecs.
    LibraryDescriptor(
        name="x264",
        version=LATEST,
        url=X264_REPO,
        source_kind="git",
        source_dir="x264",
        build_system="autotools",
        static_flags=("--enable-static", "--disable-shared"),
        configure_args=("--enable-pic",),
        ffmpeg_flags=("--enable-libx264",),
    ),
    LibraryDescriptor(
        name="x265",
        version=DEFAULT_VERSIONS["X265_VERSION"],
        version_env="X265_VERSION",
        url="https://get.videolan.org/x265/x265_{version}.tar.gz",
        archive="x265_{version}.tar.gz",
        source_dir="x265_{version}",
        build_system="cmake",
        build_subdir="build/linux",
        cmake_source="../../source",
        configure_args=("-DENABLE_SHARED=OFF", "-DENABLE_CLI=OFF", "-DENABLE_ASSEMBLY=OFF"),
        patches=(X265_CMAKE_PATCH,),
        ffmpeg_flags=("--enable-libx265",),
    ),
    LibraryDescriptor(
        name="libvpx",
        version=DEFAULT_VERSIONS["LIBVPX_VERSION"],
        version_env="LIBVPX_VERSION",
        url="https://github.com/webmproject/libvpx/archive/v{version}.tar.gz",
        archive="libvpx-{version}.tar.gz",
        build_system="autotools",
        host_flag=False,
        configure_args=(
            "--disable-examples",
            "--disable-unit-tests",
            "--enable-vp8",
            "--enable-vp9",
            "--enable-pic",
        ),
        arch_configure_args=(
            ("arm64", ("--target=arm64-darwin20-gcc",)),
            ("x86_64", ("--target=x86_64-darwin20-gcc",)),
        ),
        ffmpeg_flags=("--enable-libvpx",),
    ),
    LibraryDescriptor(
        name="libaom",
        version=DEFAULT_VERSIONS["AOM_VERSION"],
        version_env="AOM_VERSION",
        url="https://storage.googleapis.com/aom-releases/libaom-{version}.tar.gz",
        archive="libaom-{version}.tar.gz",
        build_system="cmake",
        configure_args=("-DENABLE_EXAMPLES=OFF", "-DENABLE_TESTS=OFF", "-DENABLE_TOOLS=OFF"),
        arch_configure_args=(
            ("arm64", ("-DENABLE_NEON=ON",)),
            ("x86_64", _AOM_X86_SIMD),
        ),
        ffmpeg_flags=("--enable-libaom",),
    ),
    LibraryDescriptor(
        name="dav1d",
        version=DEFAULT_VERSIONS["DAV1D_VERSION"],
        version_env="DAV1D_VERSION",
        url="https://code.videolan.org/videolan/dav1d/-/archive/{version}/dav1d-{version}.tar.gz",
        archive="dav1d-{version}.tar.gz",
        build_system="meson",
        configure_args=("-Denable_tools=false", "-Denable_tests=false"),
        ffmpeg_flags=("--enable-libdav1d",),
    ),
    # Image and subtitle libraries.
    LibraryDescriptor(
        name="libass",
        version=DEFAULT_VERSIONS["LIBASS_VERSION"],
        version_env="LIBASS_VERSION",
        url="https://github.com/libass/libass/releases/download/{version}/libass-{version}.tar.xz",
        archive="libass-{version}.tar.xz",
        build_system="autotools",
        requires=("freetype", "fontconfig", "fribidi", "harfbuzz", "libunibreak"),
        ffmpeg_flags=("--enable-libass",),
    ),
    LibraryDescriptor(
        name="libwebp",
        version=DEFAULT_VERSIONS["WEBP_VERSION"],
        version_env="WEBP_VERSION",
        url="https://storage.googleapis.com/downloads.webmproject.org/releases/webp/libwebp-{version}.tar.gz",
        archive="libwebp-{version}.tar.gz",
        build_system="autotools",
        configure_args=("--disable-gl",),
        ffmpeg_flags=("--enable-libwebp",),
    ),
    LibraryDescriptor(
        name="openjpeg",
        version=DEFAULT_VERSIONS["OPENJPEG_VERSION"],
        version_env="OPENJPEG_VERSION",
        url="https://github.com/uclouvain/openjpeg/archive/v{version}.tar.gz",
        archive="openjpeg-{version}.tar.gz",
        build_system="cmake",
        configure_args=("-DBUILD_TESTING=OFF", "-DBUILD_CODEC=OFF"),
        ffmpeg_flags=("--enable-libopenjpeg",),
    ),
    LibraryDescriptor(
        name="zimg",
        version=DEFAULT_VERSIONS["ZIMG_VERSION"],
        version_env="ZIMG_VERSION",
        url="https://github.com/sekrit-twc/zimg/archive/refs/tags/release-{version}.tar.gz",
        archive="zimg-{version}.tar.gz",
        source_dir="zimg-release-{version}",
        build_system="autotools",
        pre_configure=(("./autogen.sh",),),
        ffmpeg_flags=("--enable-libzimg",),
    ),
    # Container/format support. libbluray clashes with FFmpeg on `dec_init`.
    LibraryDescriptor(
        name="libbluray",
        version=DEFAULT_VERSIONS["LIBBLURAY_VERSION"],
        version_env="LIBBLURAY_VERSION",
        url="https://download.videolan.org/pub/videolan/libbluray/{version}/libbluray-{version}.tar.bz2",
        archive="libbluray-{version}.tar.bz2",
        build_system="autotools",
        requires=("freetype", "fontconfig"),
        configure_args=("--disable-bdjava-jar", "--disable-examples"),
        ffmpeg_flags=("--enable-libbluray",),
        enabled=False,
    ),
    LibraryDescriptor(
        name="snappy",
        version=DEFAULT_VERSIONS["SNAPPY_VERSION"],
        version_env="SNAPPY_VERSION",
        url="https://github.com/google/snappy/archive/refs/tags/{version}.tar.gz",
        archive="snappy-{version}.tar.gz",
        build_system="cmake",
        configure_args=("-DSNAPPY_BUILD_TESTS=OFF", "-DSNAPPY_BUILD_BENCHMARKS=OFF"),
        ffmpeg_flags=("--enable-libsnappy",),
    ),
)

FFMPEG = LibraryDescriptor(
    name="ffmpeg",
    version=DEFAULT_VERSIONS["FFMPEG_VERSION"],
    version_env="FFMPEG_VERSION",
    url="https://ffmpeg.org/releases/ffmpeg-{version}.tar.xz",
    archive="ffmpeg-{version}.tar.xz",
    build_system="autotools",
)


def _with_versions(
    library: LibraryDescriptor, versions: Mapping[str, str] | None
) -> LibraryDescriptor:
    if versions is None or library.version_env is None:
        return library
    version = versions.get(library.version_env)
    if not version or version == library.version:
        return library
    return library.with_version(version)


def default_catalog(versions: Mapping[str, str] | None = None) -> tuple[LibraryDescriptor, ...]:
    """Return the library descriptors with version overrides applied."""
    return tuple(_with_versions(library, versions) for library in _LIBRARIES)


def ffmpeg_descriptor(versions: Mapping[str, str] | None = None) -> LibraryDescriptor:
    return _with_versions(FFMPEG, versions)
