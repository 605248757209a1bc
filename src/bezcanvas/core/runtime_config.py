# どこで: `src/bezcanvas/core/runtime_config.py`。
# 何を: config.yaml による実行時設定（探索・ロード・キャッシュ）を提供する。
# なぜ: キャンバス寸法や既定の制御点・操作定数を、コードを触らずに切り替えられるようにするため。

"""実行時設定（`config.yaml`）の探索・ロード・キャッシュを担当する。

このモジュールは、以下を提供する:

- `config.yaml` を「同梱デフォルト → ユーザー設定（任意）」の順に適用して `RuntimeConfig` を構築
- 探索パス（CWD / HOME）と、明示指定（`set_config_path()`）の両方に対応
- 1 回ロードした結果をプロセス内でキャッシュ（設定を切り替える場合は `set_config_path()` で破棄）

実装メモ
--------
- ユーザー設定の適用は `dict.update()`（トップレベルの浅い上書き）で行う。
  ネストした mapping は「部分的にマージ」されず「丸ごと置換」される。
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]


@dataclass(frozen=True, slots=True)
class CurveConfig:
    """曲線描画の既定値（`config.yaml` の `curve`）。"""

    control_points: tuple[tuple[float, float], ...]
    steps: int
    supersamples: int
    soft_radius: float
    soft_intensity: float
    trail: bool


@dataclass(frozen=True, slots=True)
class InteractionConfig:
    """操作系の定数（`config.yaml` の `interaction`）。"""

    select_radius: float
    duplicate_offset: tuple[float, float]
    min_control_points: int


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    """bezcanvas の実行時設定。

    Attributes
    ----------
    config_path:
        実際に採用されたユーザー設定ファイルのパス。無い場合は None。
    output_dir:
        PNG 出力先ディレクトリ。
    canvas_size:
        キャンバスのピクセル寸法 (width, height)。
    curve:
        曲線描画の既定値。
    interaction:
        ヒット半径・複製オフセット・最小制御点数。
    reference_opacity, reference_zoom:
        下絵の初期不透明度とズーム。
    window_pos_draw, window_pos_control_panel:
        各ウィンドウの左上座標 (x, y)。
    control_panel_window_size:
        コントロールパネルのウィンドウサイズ (w, h)。
    """

    config_path: Path | None
    output_dir: Path
    canvas_size: tuple[int, int]
    curve: CurveConfig
    interaction: InteractionConfig
    reference_opacity: float
    reference_zoom: float
    window_pos_draw: tuple[int, int]
    window_pos_control_panel: tuple[int, int]
    control_panel_window_size: tuple[int, int]


_EXPLICIT_CONFIG_PATH: Path | None = None
_CONFIG_CACHE: RuntimeConfig | None = None


def set_config_path(path: str | Path | None) -> None:
    """以降の設定探索で使う明示 config パスを設定する（キャッシュは破棄する）。"""

    global _EXPLICIT_CONFIG_PATH, _CONFIG_CACHE
    _CONFIG_CACHE = None
    if path is None:
        _EXPLICIT_CONFIG_PATH = None
        return
    _EXPLICIT_CONFIG_PATH = Path(str(path)).expanduser()


def _default_config_candidates() -> tuple[Path, ...]:
    """既定の `config.yaml` 探索候補を返す。

    探索順（先勝ち）:
    - `./.bezcanvas/config.yaml`
    - `~/.config/bezcanvas/config.yaml`
    """

    return (
        Path.cwd() / ".bezcanvas" / "config.yaml",
        Path.home() / ".config" / "bezcanvas" / "config.yaml",
    )


def _as_mapping(value: Any, *, key: str) -> dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, dict):
        return dict(value)
    raise RuntimeError(f"{key} は mapping である必要があります: got={value!r}")


def _as_pair(value: Any, *, key: str, cast: type) -> tuple[Any, Any] | None:
    """任意値を (x, y) ペアとして解釈して返す。"""

    if value is None:
        return None
    try:
        seq = list(value)
    except Exception as exc:
        raise RuntimeError(f"{key} は [x, y] の配列である必要があります: got={value!r}") from exc
    if len(seq) != 2:
        raise RuntimeError(f"{key} は [x, y] の配列である必要があります: got={value!r}")
    try:
        return (cast(seq[0]), cast(seq[1]))
    except Exception as exc:
        raise RuntimeError(f"{key} は [x, y] の数値配列である必要があります: got={value!r}") from exc


def _as_number(value: Any, *, key: str, cast: type) -> Any:
    if value is None:
        raise RuntimeError(f"{key} が未設定です（同梱 default_config.yaml を確認してください）")
    if isinstance(value, bool):
        raise RuntimeError(f"{key} は数値である必要があります: got={value!r}")
    try:
        return cast(value)
    except Exception as exc:
        raise RuntimeError(f"{key} は数値である必要があります: got={value!r}") from exc


def _as_bool(value: Any, *, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and int(value) in (0, 1):
        return bool(int(value))
    raise RuntimeError(f"{key} は bool である必要があります: got={value!r}")


def _as_point_list(value: Any, *, key: str) -> list[tuple[float, float]]:
    if value is None:
        raise RuntimeError(f"{key} が未設定です（同梱 default_config.yaml を確認してください）")
    try:
        seq = list(value)
    except Exception as exc:
        raise RuntimeError(f"{key} は [[x, y], ...] の配列である必要があります: got={value!r}") from exc
    out: list[tuple[float, float]] = []
    for i, item in enumerate(seq):
        pair = _as_pair(item, key=f"{key}[{i}]", cast=float)
        assert pair is not None
        out.append(pair)
    return out


def _require_pair(value: Any, *, key: str, cast: type) -> tuple[Any, Any]:
    pair = _as_pair(value, key=key, cast=cast)
    if pair is None:
        raise RuntimeError(f"{key} が未設定です（同梱 default_config.yaml を確認してください）")
    return pair


def _load_yaml_text(text: str, *, source: str) -> dict[str, Any]:
    """YAML テキストを読み、トップレベル mapping を dict として返す。"""

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise RuntimeError(f"config.yaml の読み込みに失敗しました: source={source}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise RuntimeError(f"config.yaml は mapping である必要があります: source={source}")
    return dict(data)


def _load_yaml_config(path: Path) -> dict[str, Any]:
    return _load_yaml_text(path.read_text(encoding="utf-8"), source=str(path))


def _load_packaged_default_config() -> dict[str, Any]:
    """同梱 `bezcanvas/resource/default_config.yaml` をロードする。"""

    try:
        blob = (
            resources.files("bezcanvas")
            .joinpath("resource", "default_config.yaml")
            .read_text(encoding="utf-8")
        )
    except Exception as exc:  # pragma: no cover
        raise RuntimeError(
            "同梱 default_config.yaml の読み込みに失敗しました"
            "（パッケージ配布物の package-data を確認してください）"
        ) from exc
    return _load_yaml_text(blob, source="bezcanvas/resource/default_config.yaml")


def build_runtime_config(payload: dict[str, Any], *, config_path: Path | None = None) -> RuntimeConfig:
    """マージ済み payload を検証して `RuntimeConfig` を構築する。"""

    version = payload.get("version")
    if version is None:
        raise RuntimeError("config.yaml の version が未設定です")
    try:
        version_i = int(version)
    except Exception as exc:
        raise RuntimeError(f"config.yaml の version は整数である必要があります: got={version!r}") from exc
    if version_i != 1:
        raise RuntimeError(f"未対応の config.yaml version です: got={version_i}")

    paths = _as_mapping(payload.get("paths"), key="paths")
    output_text = paths.get("output_dir")
    if output_text is None or not str(output_text).strip():
        raise RuntimeError("paths.output_dir が未設定です（同梱 default_config.yaml を確認してください）")
    output_dir = Path(os.path.expandvars(os.path.expanduser(str(output_text).strip())))

    canvas = _as_mapping(payload.get("canvas"), key="canvas")
    width = _as_number(canvas.get("width"), key="canvas.width", cast=int)
    height = _as_number(canvas.get("height"), key="canvas.height", cast=int)
    if width <= 0 or height <= 0:
        raise ValueError(f"canvas の寸法は正である必要があります: got={width}x{height}")

    curve = _as_mapping(payload.get("curve"), key="curve")
    interaction = _as_mapping(payload.get("interaction"), key="interaction")

    min_control_points = _as_number(
        interaction.get("min_control_points"), key="interaction.min_control_points", cast=int
    )
    if min_control_points < 2:
        raise ValueError(
            f"interaction.min_control_points は 2 以上である必要があります: got={min_control_points}"
        )

    control_points = _as_point_list(curve.get("control_points"), key="curve.control_points")
    if len(control_points) < min_control_points:
        raise ValueError(
            "curve.control_points は interaction.min_control_points 以上の点数が必要です"
            f": got={len(control_points)}"
        )

    steps = _as_number(curve.get("steps"), key="curve.steps", cast=int)
    if steps < 1:
        raise ValueError(f"curve.steps は 1 以上である必要があります: got={steps}")
    supersamples = _as_number(curve.get("supersamples"), key="curve.supersamples", cast=int)
    if supersamples < 1:
        raise ValueError(f"curve.supersamples は 1 以上である必要があります: got={supersamples}")
    soft_radius = _as_number(curve.get("soft_radius"), key="curve.soft_radius", cast=float)
    if soft_radius <= 0.0:
        raise ValueError(f"curve.soft_radius は正の値である必要があります: got={soft_radius}")
    soft_intensity = _as_number(curve.get("soft_intensity"), key="curve.soft_intensity", cast=float)
    if not 0.0 <= soft_intensity <= 1.0:
        raise ValueError(f"curve.soft_intensity は 0..1 である必要があります: got={soft_intensity}")
    trail = _as_bool(curve.get("trail", True), key="curve.trail")

    select_radius = _as_number(interaction.get("select_radius"), key="interaction.select_radius", cast=float)
    if select_radius <= 0.0:
        raise ValueError(f"interaction.select_radius は正の値である必要があります: got={select_radius}")
    duplicate_offset = _require_pair(
        interaction.get("duplicate_offset"), key="interaction.duplicate_offset", cast=float
    )

    reference = _as_mapping(payload.get("reference"), key="reference")
    reference_opacity = _as_number(reference.get("opacity", 0.6), key="reference.opacity", cast=float)
    reference_zoom = _as_number(reference.get("zoom", 1.0), key="reference.zoom", cast=float)

    ui = _as_mapping(payload.get("ui"), key="ui")
    window_positions = _as_mapping(ui.get("window_positions"), key="ui.window_positions")
    window_pos_draw = _require_pair(window_positions.get("draw"), key="ui.window_positions.draw", cast=int)
    window_pos_control_panel = _require_pair(
        window_positions.get("control_panel"), key="ui.window_positions.control_panel", cast=int
    )
    control_panel = _as_mapping(ui.get("control_panel"), key="ui.control_panel")
    control_panel_window_size = _require_pair(
        control_panel.get("window_size"), key="ui.control_panel.window_size", cast=int
    )

    return RuntimeConfig(
        config_path=config_path,
        output_dir=output_dir,
        canvas_size=(int(width), int(height)),
        curve=CurveConfig(
            control_points=tuple(control_points),
            steps=int(steps),
            supersamples=int(supersamples),
            soft_radius=float(soft_radius),
            soft_intensity=float(soft_intensity),
            trail=bool(trail),
        ),
        interaction=InteractionConfig(
            select_radius=float(select_radius),
            duplicate_offset=(float(duplicate_offset[0]), float(duplicate_offset[1])),
            min_control_points=int(min_control_points),
        ),
        reference_opacity=float(reference_opacity),
        reference_zoom=float(reference_zoom),
        window_pos_draw=window_pos_draw,
        window_pos_control_panel=window_pos_control_panel,
        control_panel_window_size=control_panel_window_size,
    )


def runtime_config() -> RuntimeConfig:
    """実行時設定をロードして返す（キャッシュ）。

    読み込み元の優先順位（後勝ち）:
    1) 同梱 `bezcanvas/resource/default_config.yaml`
    2) 探索で見つかった `config.yaml`（任意）
    3) `set_config_path()` で明示指定された `config.yaml`（任意）
    """

    global _CONFIG_CACHE
    if _CONFIG_CACHE is not None:
        return _CONFIG_CACHE

    explicit_path = _EXPLICIT_CONFIG_PATH
    if explicit_path is not None and not explicit_path.is_file():
        raise FileNotFoundError(f"config.yaml が見つかりません: {explicit_path}")

    discovered_path: Path | None = None
    for p in _default_config_candidates():
        if p.is_file():
            discovered_path = p
            break

    payload = _load_packaged_default_config()
    if discovered_path is not None:
        payload.update(_load_yaml_config(discovered_path))
    if explicit_path is not None:
        payload.update(_load_yaml_config(explicit_path))

    cfg = build_runtime_config(payload, config_path=explicit_path or discovered_path)
    _CONFIG_CACHE = cfg
    return cfg


def output_root_dir() -> Path:
    """出力ファイルを保存する既定ルートディレクトリを返す。"""

    return Path(runtime_config().output_dir)


__all__ = [
    "CurveConfig",
    "InteractionConfig",
    "RuntimeConfig",
    "build_runtime_config",
    "output_root_dir",
    "runtime_config",
    "set_config_path",
]
