"""
Tool registry — builds a dispatcher with every tool registered.
"""
from circuit_builder.logger import ToolLogger
from circuit_builder.tools.dispatcher import ToolDispatcher
from circuit_builder.tools.enclosure import Generate3DCaseTool
from circuit_builder.tools.export_project import ExportProjectTool
from circuit_builder.tools.generate_circuit import GenerateCircuitTool
from circuit_builder.tools.intake import AnalyzePhotoTool, SearchEmailsTool
from circuit_builder.tools.parts import GetDatasheetTool, OrderPartsTool, SearchComponentsTool
from circuit_builder.tools.render_schematic import RenderSchematicTool
from circuit_builder.tools.suggest_improvements import SuggestImprovementsTool
from circuit_builder.tools.validate_circuit import ValidateCircuitTool
from circuit_builder.tools.write_arduino_code import WriteArduinoCodeTool


def create_dispatcher(logger: ToolLogger | None = None) -> ToolDispatcher:
    dispatcher = ToolDispatcher(logger=logger)
    for tool in [
        GenerateCircuitTool(),
        WriteArduinoCodeTool(),
        ValidateCircuitTool(),
        RenderSchematicTool(logger=dispatcher.logger),
        SearchComponentsTool(),
        GetDatasheetTool(),
        Generate3DCaseTool(),
        OrderPartsTool(),
        ExportProjectTool(),
        SuggestImprovementsTool(),
        AnalyzePhotoTool(),
        SearchEmailsTool(),
    ]:
        dispatcher.register_tool(tool)
    return dispatcher
