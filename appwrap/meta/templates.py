from appwrap.meta.macros import MacroId

DESKTOP_TEMPLATE = "\n".join(
    [
        "[Desktop Entry]",
        "Type=Application",
        f"Name={MacroId.APP_FRIENDLY_NAME.token}",
        f"Icon={MacroId.APP_ID.token}",
        f"StartupWMClass={MacroId.APP_BASE_NAME.token}",
        f"Comment={MacroId.APP_SHORT_SUMMARY.token}",
        f"Exec={MacroId.INSTALL_EXEC.token}",
        f"TryExec={MacroId.INSTALL_EXEC.token}",
        f"NoDisplay={MacroId.DESKTOP_NODISPLAY.token}",
        f"Terminal={MacroId.DESKTOP_TERMINAL.token}",
        f"Categories={MacroId.PRIME_CATEGORY.token};",
        f"X-AppImage-Name={MacroId.APP_ID.token}",
        f"X-AppImage-Version={MacroId.APP_VERSION.token}",
        f"X-AppImage-Arch={MacroId.BUILD_ARCH.token}",
        "MimeType=",
        "Keywords=",
    ]
)

_I1 = " " * 4
_I2 = _I1 * 2

METAINFO_TEMPLATE = "\n".join(
    [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<component type="desktop-application">',
        f"{_I1}<metadata_license>MIT</metadata_license>",
        "",
        f"{_I1}<id>{MacroId.APP_ID.token}</id>",
        f"{_I1}<name>{MacroId.APP_FRIENDLY_NAME.token}</name>",
        f"{_I1}<summary>{MacroId.APP_SHORT_SUMMARY.token}</summary>",
        f"{_I1}<developer_name>{MacroId.PUBLISHER_NAME.token}</developer_name>",
        f'{_I1}<url type="homepage">{MacroId.PUBLISHER_LINK_URL.token}</url>',
        f"{_I1}<project_license>{MacroId.APP_LICENSE_ID.token}</project_license>",
        f'{_I1}<content_rating type="oars-1.1" />',
        "",
        f'{_I1}<launchable type="desktop-id">{MacroId.APP_ID.token}.desktop</launchable>',
        "",
        f"{_I1}<description>",
        f"{_I2}{MacroId.APPSTREAM_DESCRIPTION_XML.token}",
        f"{_I1}</description>",
        "",
        f"{_I1}<categories>",
        f"{_I2}<category>{MacroId.PRIME_CATEGORY.token}</category>",
        f"{_I1}</categories>",
        "",
        f"{_I1}<releases>",
        f"{_I2}{MacroId.APPSTREAM_CHANGELOG_XML.token}",
        f"{_I1}</releases>",
        "</component>",
    ]
)
