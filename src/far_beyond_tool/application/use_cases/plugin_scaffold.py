from __future__ import annotations
"""Application use case creating a new plugin crate from the sample repository."""

from dataclasses import dataclass, field
import logging
from pathlib import Path
import re
from string import Template

from far_beyond_tool.domain.conventions import PluginConventions
from far_beyond_tool.domain.errors import FilesystemError, InvalidPluginNameError
from far_beyond_tool.domain.ports import FileSystemPort, GitClientPort, ManifestPort


LOGGER = logging.getLogger(__name__)

_PLUGIN_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")

PLUGIN_LIB_TEMPLATE = Template(
    """use async_trait::async_trait;
use horizon_event_system::{
    create_simple_plugin, EventSystem, LogLevel, PluginError, ServerContext, SimplePlugin,
};
use std::sync::Arc;
use tracing::info;

/// ${struct_name} Plugin
pub struct ${struct_name}Plugin {
    name: String,
}

impl ${struct_name}Plugin {
    pub fn new() -> Self {
        info!("${struct_name}Plugin: Creating new instance");
        Self {
            name: "${plugin_name}".to_string(),
        }
    }
}

#[async_trait]
impl SimplePlugin for ${struct_name}Plugin {
    fn name(&self) -> &str {
        &self.name
    }

    fn version(&self) -> &str {
        "1.0.0"
    }

    async fn register_handlers(&mut self, _events: Arc<EventSystem>) -> Result<(), PluginError> {
        info!("${struct_name}Plugin: Registering event handlers...");
        // Register event handlers here, for example:
        // register_handlers!(events; core {
        //     "your_event" => |event: serde_json::Value| {
        //         info!("Received event: {:?}", event);
        //         Ok(())
        //     }
        // })?;
        info!("${struct_name}Plugin: All handlers registered");
        Ok(())
    }

    async fn on_init(&mut self, context: Arc<dyn ServerContext>) -> Result<(), PluginError> {
        context.log(LogLevel::Info, "${struct_name}Plugin: Starting up!");
        info!("${struct_name}Plugin: Initialization complete");
        Ok(())
    }

    async fn on_shutdown(&mut self, context: Arc<dyn ServerContext>) -> Result<(), PluginError> {
        context.log(LogLevel::Info, "${struct_name}Plugin: Shutting down!");
        info!("${struct_name}Plugin: Shutdown complete");
        Ok(())
    }
}

create_simple_plugin!(${struct_name}Plugin);
"""
)


def validate_plugin_name(name: str) -> None:
    """Reject names that cannot become a crate/directory name."""
    if not name:
        raise InvalidPluginNameError("Plugin name cannot be empty")
    if name[0] in "-_":
        raise InvalidPluginNameError("Plugin name cannot start with a hyphen or underscore")
    if not _PLUGIN_NAME_PATTERN.match(name):
        raise InvalidPluginNameError(
            "Plugin name can only contain alphanumeric characters, underscores, and hyphens"
        )


def to_pascal_case(value: str) -> str:
    words = [word for word in re.split(r"[^0-9A-Za-z]+", value) if word]
    return "".join(word[0].upper() + word[1:].lower() for word in words)


def render_plugin_lib(plugin_name: str) -> str:
    return PLUGIN_LIB_TEMPLATE.substitute(struct_name=to_pascal_case(plugin_name), plugin_name=plugin_name)


@dataclass(slots=True)
class PluginScaffolder:
    """Clone the sample plugin and turn it into `<target_dir>/<name>`.

    Steps: clone sample, rename `package.name` to `<prefix><name>`, replace
    `src/lib.rs` with the starter plugin, drop the sample's `.git` and README.
    """

    git_client: GitClientPort
    manifest: ManifestPort
    filesystem: FileSystemPort
    sample_repository_url: str
    conventions: PluginConventions = field(default_factory=PluginConventions)

    def execute(self, name: str, target_dir: Path) -> Path:
        validate_plugin_name(name)
        plugin_dir = target_dir / name
        if self.filesystem.path_exists(plugin_dir):
            raise FilesystemError(f"Directory '{plugin_dir}' already exists")

        LOGGER.info(
            "plugin scaffold started",
            extra={"event": "scaffold.start", "plugin": name, "plugin_dir": str(plugin_dir)},
        )

        self.git_client.clone(self.sample_repository_url, plugin_dir)

        package_name = self.conventions.crate_name(name)
        self.manifest.set_package_name(plugin_dir / self.conventions.manifest_filename, package_name)

        lib_path = plugin_dir / "src" / "lib.rs"
        try:
            self.filesystem.ensure_directory(lib_path.parent)
            lib_path.write_text(render_plugin_lib(name), encoding="utf-8")
            self.filesystem.remove_tree(plugin_dir / ".git")
            self.filesystem.remove_tree(plugin_dir / "README.md")
        except OSError as error:
            raise FilesystemError(f"Failed to prepare plugin directory {plugin_dir}: {error}") from error

        LOGGER.info(
            "plugin scaffold completed",
            extra={"event": "scaffold.completed", "plugin": name, "package_name": package_name},
        )
        return plugin_dir
