"""
Generate filelist_<client>.yml for the patch server from a folder of client files.
Run from the patch server root: python -m launcheq.generate_filelist rof --prefix https://patch.example.com
Reads files from ./<client>/ (served as <prefix>/<client>/<name>) and writes ./filelist_<client>.yml.
With --exe, also writes <exe base name>-hash.txt for launcher self-update.
"""

import argparse
import hashlib
import os

import yaml

from launcheq.checksum import md5_file
from launcheq.config import DEFAULT_CLIENT_VERSION
from launcheq.selfupdate import exe_base_name


def _collect_release_paths(release_dir: str) -> list[str]:
    """Relative paths (forward slashes) of every file under release_dir, dot files and dot dirs excluded."""
    paths = []
    for root, dirs, files in os.walk(release_dir):
        dirs[:] = [d for d in dirs if not d.startswith(".")]
        for f in files:
            if f.startswith("."):
                continue
            rel = os.path.relpath(os.path.join(root, f), release_dir)
            paths.append(rel.replace("\\", "/"))
    return sorted(paths)


def _read_deletes(deletes_path: str | None) -> list[str]:
    """One path per line; blank lines and # comments ignored."""
    if not deletes_path:
        return []
    names = []
    with open(deletes_path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#"):
                names.append(line.replace("\\", "/"))
    return names


def build_file_list(release_dir: str, download_prefix: str, deletes: list[str] | None = None) -> dict:
    """
    File list document for release_dir. The version is an MD5 over every name:md5 pair,
    so it only changes when the release content changes.
    """
    downloads = []
    version_hash = hashlib.md5()
    for path in _collect_release_paths(release_dir):
        full = os.path.join(release_dir, path.replace("/", os.sep))
        digest = md5_file(full)
        downloads.append({"name": path, "size": os.path.getsize(full), "md5": digest})
        version_hash.update(f"{path}:{digest}\n".encode("utf-8"))
    deletes = deletes or []
    for name in deletes:
        version_hash.update(f"-{name}\n".encode("utf-8"))
    return {
        "version": version_hash.hexdigest(),
        "downloadPrefix": download_prefix.rstrip("/"),
        "downloads": downloads,
        "deletes": [{"name": name} for name in deletes],
    }


def write_exe_hash(exe_path: str, out_dir: str) -> str:
    """Write <base>-hash.txt with the MD5 of exe_path. Returns the written path."""
    out_path = os.path.join(out_dir, f"{exe_base_name(exe_path)}-hash.txt")
    with open(out_path, "w", encoding="utf-8") as f:
        f.write(md5_file(exe_path) + "\n")
    return out_path


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate a launcheq file list.")
    parser.add_argument("client", nargs="?", default=DEFAULT_CLIENT_VERSION, help="client folder name (default: rof)")
    parser.add_argument("--prefix", required=True, help="download prefix URL clients fetch files from")
    parser.add_argument("--root", default=os.getcwd(), help="patch server root (default: current directory)")
    parser.add_argument("--deletes", help="text file listing paths clients must delete")
    parser.add_argument("--exe", help="launcher executable to publish a hash for")
    args = parser.parse_args(argv)

    release_dir = os.path.join(args.root, args.client)
    if not os.path.isdir(release_dir):
        print(f"Not found: {release_dir}")
        return 1

    file_list = build_file_list(release_dir, args.prefix, _read_deletes(args.deletes))
    out_path = os.path.join(args.root, f"filelist_{args.client}.yml")
    with open(out_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(file_list, f, default_flow_style=False, sort_keys=False)
    print(f"Wrote {out_path} with {len(file_list['downloads'])} entries, version {file_list['version'][:8]}.")

    if args.exe:
        print(f"Wrote {write_exe_hash(args.exe, args.root)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
