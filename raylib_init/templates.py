"""
templates.py

Responsibility: Hold the fixed templates for every file raylib-init generates.

Templates are line sequences; a line containing `{{ project_name }}` is a
placeholder line and is rendered by `renderer.py`. All other lines are written
verbatim. The data is immutable and shared for the lifetime of the process.
"""

from __future__ import annotations

from dataclasses import dataclass

PLACEHOLDER = "{{ project_name }}"


@dataclass(frozen=True)
class FileTemplate:
    """A generated file: its project-relative path and its lines."""

    path: str
    lines: tuple[str, ...]
    executable: bool = False

    @property
    def placeholder_lines(self) -> tuple[int, ...]:
        return tuple(i for i, line in enumerate(self.lines) if "{{" in line)


GDBINIT = FileTemplate(
    path="gdbinit",
    lines=(
        "set $_exitcode = -1",
        "run",
        "if $_exitcode != -1",
        "    quit",
        "end",
    ),
)

CMAKE_LISTS = FileTemplate(
    path="CMakeLists.txt",
    lines=(
        "cmake_minimum_required(VERSION 3.10)",
        f"project({PLACEHOLDER} VERSION 0.1)",
        "set(CMAKE_C_STANDARD 99)",
        "set(CMAKE_C_STANDARD_REQUIRED True)",
        "set(EXECUTABLE_OUTPUT_PATH ${CMAKE_BINARY_DIR}/bin)",
        'file(GLOB SOURCES "src/*.c")',
        f"add_executable({PLACEHOLDER} ${{SOURCES}})",
        f"target_include_directories({PLACEHOLDER} PUBLIC ${{PROJECT_BINARY_DIR}})",
        "add_subdirectory(./deps/raylib)",
        f"target_link_libraries({PLACEHOLDER} PRIVATE raylib)",
        'if (${CMAKE_SYSTEM_NAME} MATCHES "Linux")',
        f"    target_link_libraries({PLACEHOLDER} PRIVATE glfw m pthread)",
        'elseif (${CMAKE_SYSTEM_NAME} MATCHES "Windows")',
        f"    target_link_libraries({PLACEHOLDER} PRIVATE opengl32 gdi32)",
        "endif()",
        "file(COPY res/ DESTINATION ${EXECUTABLE_OUTPUT_PATH}/res)",
    ),
)

BUILD_SH = FileTemplate(
    path="build.sh",
    lines=(
        "#!/bin/bash",
        "# check if build directory exists",
        'if [ ! -d "build" ]; then',
        "  mkdir build",
        "fi",
        "cd build",
        "cmake ..",
        "make",
    ),
    executable=True,
)

DEBUG_SH = FileTemplate(
    path="debug.sh",
    lines=(
        "#!/bin/bash",
        "./build.sh",
        f"gdb -x gdbinit ./build/bin/{PLACEHOLDER}",
    ),
    executable=True,
)

BUILD_BAT = FileTemplate(
    path="build.bat",
    lines=(
        "@echo off",
        'IF NOT EXIST "build" (',
        "  mkdir build",
        ")",
        "cd build",
        'cmake .. -G "MinGW Makefiles"',
        "cmake --build .",
    ),
)

MAIN_C = FileTemplate(
    path="src/main.c",
    lines=(
        '#include "raylib.h"',
        "",
        "#define SCREEN_WIDTH 640",
        "#define SCREEN_HEIGHT 480",
        "int main(void)",
        "{",
        f'    InitWindow(SCREEN_WIDTH, SCREEN_HEIGHT, "{PLACEHOLDER}");',
        "    SetTargetFPS(60);",
        "    while (!WindowShouldClose()) {",
        "        BeginDrawing();",
        "            ClearBackground(RAYWHITE);",
        '            DrawText("Hello, World!", 0, 0, 40, BLACK);',
        "        EndDrawing();",
        "    }",
        "    CloseWindow();",
        "    return 0;",
        "}",
    ),
)

# Generation order.
PROJECT_TEMPLATES: tuple[FileTemplate, ...] = (
    GDBINIT,
    CMAKE_LISTS,
    BUILD_SH,
    DEBUG_SH,
    BUILD_BAT,
    MAIN_C,
)


def get_template(path: str) -> FileTemplate:
    for template in PROJECT_TEMPLATES:
        if template.path == path:
            return template
    raise KeyError(path)
