"""Controller resolution and invocation for one generation unit.

Flow: narrow the dependency view, resolve the class (compiling it once if
it is missing and compilation is enabled), restore the view, validate the
method contract, invoke, and install the result into the render context.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..build.artifacts import DependencyResolver, resolution_window
from ..build.compiler import CompileFallback, CompilerService
from ..core.models import BuildProject, ControllerSpec
from ..errors import ControllerConfigurationError, ControllerError, TypeNotFound
from ..rendering.context import RenderContext
from .contract import MethodHandle, find_property_setter, get_invocable_method
from .invoker import ControllerInvoker
from .loader import SymbolLoader
from .results import apply_results

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedController:
    """Runtime binding of a controller spec, discarded after the unit."""

    controller_class: type
    method: MethodHandle
    property_setter: MethodHandle | None


class ControllerPipeline:
    def __init__(
        self,
        project: BuildProject,
        *,
        loader: SymbolLoader | None = None,
        compiler: CompilerService | None = None,
        resolver: DependencyResolver | None = None,
    ) -> None:
        self.project = project
        self.loader = loader or SymbolLoader()
        self.compile_fallback = CompileFallback(project, compiler)
        self.resolver = resolver

    def find_controller_class(self, spec: ControllerSpec) -> type:
        """Resolve the controller class, compiling it at most once."""
        with resolution_window(self.project, spec.artifact_view, self.resolver) as classpath:
            logger.info("Loading controller class...")
            try:
                return self.loader.resolve(spec.class_name, classpath)
            except TypeNotFound as e:
                if not spec.compile:
                    raise ControllerConfigurationError(
                        f"The class {spec.class_name} is not in the classpath, "
                        "and compilation is not enabled.",
                        class_name=spec.class_name,
                        method_name=spec.method,
                    ) from e
                logger.info(
                    f"Unable to find the class: {spec.class_name}.  Attempting to compile it..."
                )

            self.compile_fallback.compile(
                spec.class_name,
                source_version=spec.source_version,
                target_version=spec.target_version,
            )
            logger.info("Loading compiled controller class...")
            return self.loader.resolve(spec.class_name, classpath)

    def resolve(self, spec: ControllerSpec) -> ResolvedController:
        controller_class = self.find_controller_class(spec)
        return ResolvedController(
            controller_class=controller_class,
            method=get_invocable_method(controller_class, spec.method),
            property_setter=find_property_setter(controller_class),
        )

    def run(self, spec: ControllerSpec, context: RenderContext) -> int:
        """Invoke the controller and install its result into ``context``.

        Returns:
            Number of attributes installed
        """
        try:
            resolved = self.resolve(spec)
            invoker = ControllerInvoker(resolved.controller_class)
            result = invoker.invoke(
                resolved.method, resolved.property_setter, spec.properties
            )
            return apply_results(
                result, context, class_name=spec.class_name, method_name=spec.method
            )
        except ControllerError as e:
            e.class_name = e.class_name or spec.class_name
            e.method_name = e.method_name or spec.method
            raise


def invoke_controller(
    spec: ControllerSpec,
    project: BuildProject,
    context: RenderContext,
    *,
    compiler: CompilerService | None = None,
    resolver: DependencyResolver | None = None,
) -> int:
    """Run the controller pipeline for one unit with a fresh resolution."""
    pipeline = ControllerPipeline(project, compiler=compiler, resolver=resolver)
    return pipeline.run(spec, context)
