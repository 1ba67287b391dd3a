#!/usr/bin/env python3
"""浏览器自动化程序：打开网页、检测暗色模式实现并监听主题切换 (基于 Playwright)"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from darkmode_detection import DarkModeDetector
from darkmode_detection.browser import BrowserSession, PlaywrightPage, pump
from darkmode_detection.config import DetectorConfig, load_config
from darkmode_detection.errors import ConfigError
from darkmode_detection.monitor import DetectionUpdateEvent, MonitorEvent, ThemeChangeMonitor
from darkmode_detection.scheduling import PolledScheduler
from darkmode_detection.types import DetectionResult


class BrowserAutomation:
    """浏览器自动化类 (Playwright 实现)"""

    def __init__(self, config_path: str = "config.json"):
        """初始化浏览器自动化

        Args:
            config_path: 配置文件路径
        """
        self.config: DetectorConfig = self._load_config(config_path)
        self.session: Optional[BrowserSession] = None
        self.detector = DarkModeDetector.from_config(self.config.detection)
        self.output_file = Path(self.config.output)
        self.output_file.parent.mkdir(exist_ok=True, parents=True)

    def _load_config(self, config_path: str) -> DetectorConfig:
        """加载配置文件"""
        try:
            return load_config(config_path)
        except ConfigError as e:
            print(f"❌ 配置文件错误: {e}")
            raise

    def init_browser(self):
        """初始化浏览器"""
        browser_config = self.config.browser
        try:
            print("🌐 正在启动浏览器...")
            self.session = BrowserSession(browser_config)
            self.session.start()
            if browser_config.color_scheme:
                print(f"🎨 系统配色偏好: {browser_config.color_scheme}")
            print("✅ 浏览器启动成功")
        except Exception as e:
            print(f"❌ 浏览器启动失败: {e}")
            print("💡 提示: 请确保已安装 Playwright 浏览器")
            print("    安装命令: playwright install chromium")
            raise

    def open_url(self, url: str) -> PlaywrightPage:
        """打开目标网址

        Args:
            url: 目标网址
        """
        if not self.session:
            raise RuntimeError("浏览器未初始化，请先调用 init_browser()")

        print(f"🔗 正在打开网址: {url}")
        page = self.session.open(url)
        print("✅ 网页加载完成")
        return page

    def detect(self, page: PlaywrightPage) -> DetectionResult:
        """对当前页面执行一次暗色模式检测"""
        result = self.detector.detect(page)
        self._print_result(result)
        return result

    def watch(self, page: PlaywrightPage, seconds: float) -> List[Dict]:
        """监听页面主题切换

        Args:
            page: 已打开的页面
            seconds: 监听时长（秒）

        Returns:
            监听期间收到的事件列表
        """
        events: List[Dict] = []
        scheduler = PolledScheduler()

        def on_event(event: MonitorEvent):
            timestamp = datetime.now().isoformat()
            if isinstance(event, DetectionUpdateEvent):
                result = event.result
                print(
                    f"  🔄 重新检测: 置信度 {result.confidence.value}, "
                    f"当前主题 {result.current_theme} (合并 {len(event.mutations)} 次变更)"
                )
                events.append({"type": "detection-update", "result": result.to_dict(), "timestamp": timestamp})
            else:
                print(f"  🎨 主题变更: <{event.target}> {event.attribute}: {event.old_value!r} → {event.new_value!r}")
                events.append(
                    {
                        "type": "theme-change",
                        "attribute": event.attribute,
                        "old_value": event.old_value,
                        "new_value": event.new_value,
                        "target": event.target,
                        "timestamp": timestamp,
                    }
                )

        monitor = ThemeChangeMonitor(
            page,
            on_event,
            detector=self.detector,
            debounce=self.config.monitor.debounce,
            scheduler=scheduler,
            target_ids=self.config.monitor.target_ids,
        )
        print(f"\n👀 开始监听主题切换 ({seconds:.0f} 秒)，可在浏览器中手动切换主题...")
        with monitor:
            print(f"  📌 监听元素数: {len(monitor.targets())}")
            pump(page.page, scheduler, seconds)
        print(f"⏹️  监听结束，共收到 {len(events)} 个事件")
        return events

    def save_results(self, results: Dict):
        """保存结果到 JSON 文件"""
        try:
            with open(self.output_file, "w", encoding="utf-8") as f:
                json.dump(results, f, ensure_ascii=False, indent=2)
            print(f"💾 结果已保存到: {self.output_file}")
        except Exception as e:
            print(f"❌ 保存结果失败: {str(e)}")

    def close(self):
        """关闭浏览器"""
        if self.session:
            print("\n🔚 关闭浏览器...")
            self.session.close()
            self.session = None
            print("✅ 浏览器已关闭")

    def run(self):
        """运行完整流程"""
        urls = self.config.target_urls
        if not urls:
            print("⚠️  配置中未指定 targetUrl，程序退出")
            return

        results: Dict[str, Dict] = {}
        try:
            # 1. 初始化浏览器
            self.init_browser()

            for url in urls:
                print("\n" + "=" * 80)
                try:
                    # 2. 打开网址
                    page = self.open_url(url)

                    # 3. 检测
                    result = self.detect(page)
                    entry: Dict = {"result": result.to_dict()}

                    # 4. 监听主题切换（可选）
                    if self.config.watch_seconds > 0:
                        entry["events"] = self.watch(page, self.config.watch_seconds)

                    results[url] = entry
                except Exception as e:
                    print(f"  ❌ 检测失败: {str(e)}")
                    results[url] = {"error": str(e)}

            # 5. 保存结果
            self.save_results(results)
        finally:
            self.close()

    def _print_result(self, result: DetectionResult):
        """打印单个页面的检测结果"""
        summary = result.summary
        status = "✅ 检测到暗色模式特征" if result.has_dark_mode else "ℹ️  未检测到暗色模式特征"
        print(f"  {status}")
        print(f"  📊 置信度: {result.confidence.value}")
        print(f"  🌓 当前主题: {result.current_theme}")
        if result.implementation:
            print(f"  🧩 实现方式: {', '.join(result.implementation)}")
        if summary.detected_libraries:
            print(f"  📚 检测到的库: {', '.join(summary.detected_libraries)}")
        print(f"  🔍 信号数: {summary.total_signals}")
        for signal in result.signals:
            detail = ", ".join(f"{key}={value}" for key, value in signal.detail.items())
            print(f"     - [{signal.tier.value}] {signal.kind.value}: {detail}")


def main():
    """主函数"""
    import sys

    # 支持命令行参数指定配置文件
    config_file = sys.argv[1] if len(sys.argv) > 1 else "config.json"

    print("\n" + "=" * 80)
    print("🌗 网页暗色模式检测系统 (Playwright)")
    print("=" * 80)
    print(f"📄 配置文件: {config_file}\n")

    automation = BrowserAutomation(config_file)
    automation.run()

    print("\n✅ 程序执行完成!\n")


if __name__ == "__main__":
    main()
