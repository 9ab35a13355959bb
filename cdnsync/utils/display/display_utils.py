"""
Display and UI utilities for cdnsync
"""
from colorama import Fore, Style


def print_banner():
    """Display cdnsync banner."""
    banner = (
        f"\n{Fore.CYAN}  ╺┳╸ cdnsync{Style.RESET_ALL}"
        f"  {Fore.WHITE}static site publish & CDN sync{Style.RESET_ALL}\n"
    )
    print(banner)


def format_bytes(size):
    """Human-readable byte count (e.g. ``1.5 MB``)."""
    size = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


def print_target(target, masked_access_key=""):
    """Print the active environment target."""
    print(f"  Environment : {target.name}")
    print(f"  Destination : {target.destination}")
    print(f"  Endpoint    : {target.endpoint_url or 'default'}")
    if target.acl:
        print(f"  ACL         : {target.acl}")
    if masked_access_key:
        print(f"  Access key  : {masked_access_key}")
    if not target.sync_enabled:
        print(f"  {Fore.YELLOW}CDN sync disabled for this environment{Style.RESET_ALL}")
    print()


def print_manifest(manifest, limit=50):
    """
    Print the planned uploads.

    Args:
        manifest: SyncManifest to display
        limit: Maximum number of entries to list
    """
    if manifest.is_empty():
        print(f"{Fore.GREEN}  Nothing to upload, remote is up to date "
              f"({manifest.scanned} file(s) checked){Style.RESET_ALL}")
        return

    print(f"{Fore.CYAN}  Planned uploads ({len(manifest)}, "
          f"{format_bytes(manifest.total_bytes)}):{Style.RESET_ALL}")
    for asset in manifest.entries[:limit]:
        tag = "new" if asset.key in manifest.new_keys else "changed"
        colour = Fore.GREEN if tag == "new" else Fore.YELLOW
        print(f"    {colour}{tag:<8}{Style.RESET_ALL}{asset.key}")
    if len(manifest) > limit:
        print(f"    ... and {len(manifest) - limit} more")
    print(f"  Up to date: {manifest.skipped}")


def print_sync_summary(report):
    """
    Print the final run summary, enumerating every failed key.

    Args:
        report: PipelineReport from the pipeline
    """
    result = report.result
    print(f"\n{Fore.CYAN}Summary:{Style.RESET_ALL}")
    print(f"  State    : {report.state.value}")
    if report.manifest is not None:
        print(f"  Planned  : {len(report.manifest)}")
    if result is not None:
        print(f"  Uploaded : {len(result.succeeded)}")
        print(f"  Failed   : {len(result.failed)}")
        if result.skipped:
            print(f"  Skipped  : {len(result.skipped)} (cancelled)")
        for failure in result.failed:
            print(f"    {Fore.RED}✗ {failure.key}{Style.RESET_ALL}: {failure.reason} "
                  f"({failure.attempts} attempt(s))")
    print(f"  Duration : {report.duration:.1f}s")

    if report.succeeded:
        print(f"\n{Fore.GREEN}[SUCCESS] Publish complete{Style.RESET_ALL}\n")
    else:
        print(f"\n{Fore.RED}[FAILED] {report.error or 'publish failed'} "
              f"(exit {int(report.exit_code)}){Style.RESET_ALL}\n")
