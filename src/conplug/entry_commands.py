from pathlib import Path
from typing import List, Optional, Sequence

from conplug.core.engine import ConplugEngine
from conplug.core.errors import Diagnostic
from conplug.core.selection import Selection, SelectionStore
from conplug.core.settings import Settings
from conplug.core.workspace import WorkspaceManager
from conplug.entry_command_context import CommandContext


def _print_diagnostics(ctx: CommandContext, diagnostics: List[Diagnostic]) -> None:
    for diag in diagnostics:
        ctx.print_err(f"[conplug] {diag}")


def _build_engine(roots: Sequence[str], settings_obj: Settings, ctx: CommandContext,
                  diagnostics: List[Diagnostic]) -> ConplugEngine:
    normalized = WorkspaceManager.normalize_roots(
        [ctx.normalize_path(r) for r in roots], default=str(ctx.cwd))
    engine = ConplugEngine(settings_obj, roots=normalized)
    engine.load_all(diagnostics)
    return engine


def _resolve_selection(engine: ConplugEngine, store: SelectionStore, profiles: Sequence[str],
                       all_files: bool) -> Selection:
    if all_files:
        return Selection.all_files()
    if profiles:
        return Selection.of(profiles)
    saved = store.load()
    pruned = engine.prune_selection(saved)
    if pruned != saved:
        store.save(pruned)
    return pruned


def _cmd_profiles(engine: ConplugEngine, ctx: CommandContext) -> int:
    payload = []
    for name in engine.list_profile_names():
        profile = engine.get_profile(name)
        payload.append({
            "name": profile.name,
            "root": profile.root_path,
            "parents": list(profile.parents),
            "include": list(profile.include_patterns),
            "exclude": list(profile.exclude_patterns),
        })
    ctx.print_json(payload)
    return 0


def _cmd_files(engine: ConplugEngine, store: SelectionStore, ctx: CommandContext,
               profiles: Sequence[str], all_files: bool, diagnostics: List[Diagnostic]) -> int:
    selection = _resolve_selection(engine, store, profiles, all_files)
    if selection.is_empty:
        ctx.print_err("[conplug] No profiles selected. Use 'conplug select' or pass --profile/--all.")
        return 1
    files = sorted(engine.resolve_selection(selection, diagnostics))
    _print_diagnostics(ctx, diagnostics)
    for path in files:
        ctx.print_line(path)
    return 0 if files else 1


def _cmd_render(engine: ConplugEngine, store: SelectionStore, ctx: CommandContext,
                profiles: Sequence[str], all_files: bool, assume_yes: bool,
                output: Optional[str], max_bytes: Optional[int],
                diagnostics: List[Diagnostic]) -> int:
    selection = _resolve_selection(engine, store, profiles, all_files)
    if selection.is_empty:
        ctx.print_err("[conplug] No profiles selected. Use 'conplug select' or pass --profile/--all.")
        return 1

    options = engine.render_options(max_content_bytes=max_bytes) if max_bytes else engine.render_options()
    if selection.is_all_files and not assume_yes:
        limit_mb = round(options.max_content_bytes / 1024 / 1024)
        prompt = f"This will process ALL files in the workspace (up to {limit_mb}MB limit). Continue?"
        if not ctx.confirm(prompt):
            return 1

    files = sorted(engine.resolve_selection(selection, diagnostics))
    if not files:
        _print_diagnostics(ctx, diagnostics)
        ctx.print_err("[conplug] No files to concatenate in the selected profiles")
        return 1

    result = engine.render(files, options)
    _print_diagnostics(ctx, diagnostics + result.diagnostics)

    if output:
        out_path = Path(output)
        if not out_path.is_absolute():
            out_path = Path(ctx.cwd) / out_path
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(result.content, encoding="utf-8")
        ctx.print_err(f"[conplug] Wrote {out_path}")
    else:
        ctx.write(result.content)

    if result.truncated:
        ctx.print_err("[conplug] Content size limit exceeded. File list generated.")
    elif result.largest_file:
        largest = result.largest_file
        ctx.print_err(f"[conplug] Largest file: {largest.rel_path} ({largest.size} bytes)")
    return 0


def _cmd_select(engine: ConplugEngine, store: SelectionStore, ctx: CommandContext,
                profiles: Sequence[str], all_files: bool, clear: bool) -> int:
    if clear:
        store.clear()
        ctx.print_json(Selection.none().to_dict())
        return 0
    if all_files:
        selection = Selection.all_files()
    elif profiles:
        unknown = [p for p in profiles if p not in engine.registry]
        if unknown:
            ctx.print_err(f"[conplug] Unknown profile(s): {', '.join(unknown)}")
            return 2
        selection = Selection.of(profiles)
    else:
        selection = engine.prune_selection(store.load())
        ctx.print_json(selection.to_dict())
        return 0
    store.save(selection)
    ctx.print_json(selection.to_dict())
    return 0


def _cmd_doctor(engine: ConplugEngine, store: SelectionStore, ctx: CommandContext) -> int:
    ctx.write(engine.describe())
    selection = store.load()
    ctx.print_line("")
    ctx.print_line("## Selection")
    if selection.is_all_files:
        ctx.print_line("* Current Profiles: all files")
    else:
        ctx.print_line(f"* Current Profiles: {', '.join(selection.names) if selection.names else 'None'}")
    return 0


def run_cmd(ns, settings_obj: Settings, ctx: Optional[CommandContext] = None) -> int:
    ctx = ctx or CommandContext()
    diagnostics: List[Diagnostic] = []
    engine = _build_engine(ns.root or [], settings_obj, ctx, diagnostics)
    store = SelectionStore(settings_obj.selection_path)

    profiles = getattr(ns, "profile", None) or []
    all_files = bool(getattr(ns, "all", False))

    if ns.command == "profiles":
        _print_diagnostics(ctx, diagnostics)
        return _cmd_profiles(engine, ctx)
    if ns.command == "files":
        return _cmd_files(engine, store, ctx, profiles, all_files, diagnostics)
    if ns.command == "render":
        return _cmd_render(engine, store, ctx, profiles, all_files, ns.yes, ns.output,
                           ns.max_bytes, diagnostics)
    if ns.command == "select":
        _print_diagnostics(ctx, diagnostics)
        return _cmd_select(engine, store, ctx, profiles, all_files, ns.clear)
    if ns.command == "doctor":
        _print_diagnostics(ctx, diagnostics)
        return _cmd_doctor(engine, store, ctx)
    ctx.print_err(f"[conplug] Unknown command: {ns.command}")
    return 2
