#!/usr/bin/env python3
"""批量检测网页暗色模式的主程序"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Dict, List

from darkmode_detection import ConfidenceTier, DarkModeDetector
from darkmode_detection.browser import BrowserSession
from darkmode_detection.config import BrowserConfig

# 置信度从低到高
TIER_ORDER = [ConfidenceTier.LOW, ConfidenceTier.MEDIUM, ConfidenceTier.HIGH, ConfidenceTier.VERY_HIGH]


def analyze_urls(
    urls: List[str],
    skip_expensive: bool = False,
    color_scheme: str = None,
) -> dict:
    """批量检测指定网址列表

    Args:
        urls: 网址列表
        skip_expensive: 是否跳过需要遍历整个 DOM 的规则（默认 False）
        color_scheme: 浏览器配色偏好 (dark / light / None)

    Returns:
        包含所有检测结果的字典
    """
    if not urls:
        print("⚠️  没有需要检测的网址")
        return {}

    detector = DarkModeDetector(skip_expensive=skip_expensive)
    mode = "快速模式（跳过全量 DOM 扫描）" if skip_expensive else "完整模式"
    print(f"🔍 检测模式: {mode}")
    print(f"📁 共 {len(urls)} 个网址")
    print("=" * 80)

    all_results = {}
    with BrowserSession(BrowserConfig(headless=True, color_scheme=color_scheme)) as session:
        for idx, url in enumerate(urls, 1):
            print(f"\n[{idx}/{len(urls)}] 检测: {url}")
            try:
                page = session.open(url)
                result = detector.detect(page)
                if result.has_dark_mode:
                    print(f"  ✅ 置信度 {result.confidence.value}, 当前主题 {result.current_theme}")
                    if result.implementation:
                        print(f"     实现方式: {', '.join(result.implementation)}")
                else:
                    print("  ℹ️  未检测到任何信号")
                all_results[url] = result.to_dict()
            except Exception as e:
                print(f"  ❌ 检测失败: {str(e)}")
                all_results[url] = {"error": str(e)}

    print("\n" + "=" * 80)
    print(f"\n✨ 检测完成! 共处理 {len(urls)} 个网址\n")
    return all_results


def reorganize_results(results: dict, min_confidence: ConfidenceTier = ConfidenceTier.MEDIUM) -> dict:
    """重新整理结果，将支持和不支持暗色模式的网页分类

    Args:
        results: 原始检测结果字典
        min_confidence: 视为支持暗色模式的最低置信度

    Returns:
        重新整理后的结果字典，包含 supported / unsupported / failed 三个数组
    """
    threshold = TIER_ORDER.index(min_confidence)
    supported = []
    unsupported = []
    failed = []

    for url, data in results.items():
        if "error" in data:
            failed.append({"url": url, "error": data["error"]})
            continue
        tier = ConfidenceTier(data["confidence"])
        item = {
            "url": url,
            "confidence": tier.value,
            "current_theme": data["current_theme"],
            "implementation": data["implementation"],
        }
        if TIER_ORDER.index(tier) >= threshold:
            supported.append(item)
        else:
            unsupported.append(item)

    return {
        "supported": supported,
        "unsupported": unsupported,
        "failed": failed,
        "details": results,
        "summary": {
            "total": len(results),
            "supported_count": len(supported),
            "unsupported_count": len(unsupported),
            "failed_count": len(failed),
            "min_confidence": min_confidence.value,
        },
    }


def save_results_to_json(results: dict, output_file: str = "detection_results.json"):
    """将检测结果保存为 JSON 文件"""
    try:
        with open(output_file, "w", encoding="utf-8") as f:
            json.dump(results, f, ensure_ascii=False, indent=2)
        print(f"💾 结果已保存到: {output_file}")
    except Exception as e:
        print(f"❌ 保存结果失败: {str(e)}")


def print_summary(organized: dict):
    """打印检测结果摘要"""
    summary = organized["summary"]
    print("\n" + "=" * 80)
    print("📊 检测摘要")
    print("=" * 80)
    print(f"\n总网址数: {summary['total']}")
    print(f"  - 支持暗色模式 (>= {summary['min_confidence']}): {summary['supported_count']}")
    print(f"  - 证据不足: {summary['unsupported_count']}")
    print(f"  - 检测失败: {summary['failed_count']}")

    implementation_counts: Dict[str, int] = {}
    for item in organized["supported"]:
        for tag in item["implementation"]:
            implementation_counts[tag] = implementation_counts.get(tag, 0) + 1
    if implementation_counts:
        print("\n实现方式统计:")
        for tag, count in sorted(implementation_counts.items(), key=lambda x: x[1], reverse=True):
            print(f"  - {tag}: {count} 次")
    print("\n" + "=" * 80)


def main():
    """主函数"""
    script_dir = Path(__file__).parent

    # ==================== 配置参数 ====================
    SKIP_EXPENSIVE = False  # 是否跳过全量 DOM 扫描（大型页面可设为 True）
    MIN_CONFIDENCE = ConfidenceTier.MEDIUM  # 视为支持暗色模式的最低置信度
    COLOR_SCHEME = None  # 浏览器配色偏好: "dark" / "light" / None
    # ===================================================

    # 网址来自命令行参数，或者 urls.txt（每行一个）
    urls = sys.argv[1:]
    if not urls:
        url_file = script_dir / "urls.txt"
        if url_file.exists():
            urls = [line.strip() for line in url_file.read_text(encoding="utf-8").splitlines() if line.strip()]

    print("\n" + "=" * 80)
    print("🌗 批量暗色模式检测工具")
    print("=" * 80)
    print(f"📊 最低置信度: {MIN_CONFIDENCE.value}\n")

    results = analyze_urls(urls, skip_expensive=SKIP_EXPENSIVE, color_scheme=COLOR_SCHEME)

    if results:
        organized = reorganize_results(results, MIN_CONFIDENCE)
        print_summary(organized)
        save_results_to_json(organized, str(script_dir / "detection_results.json"))

    print("\n✅ 程序执行完成!\n")


if __name__ == "__main__":
    main()
