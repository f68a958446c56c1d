"""QML UI definition for FocusPie."""

from __future__ import annotations

FOCUSPIE_QML = r"""
import QtQuick 2.15
import QtQuick.Controls 2.15
import QtQuick.Layouts 1.15

ApplicationWindow {
    id: root
    visible: true
    width: 900
    height: 640
    title: "FocusPie"
    color: "#0f1115"

    property bool showTaskPanel: false
    property string editingTaskId: ""
    property string formError: ""
    property string statusMessage: ""

    function ringColor(kind) {
        return kind === "break" ? "#22c55e" : "#3b82f6"
    }

    function openEditor(taskId, name, goal, priority) {
        editingTaskId = taskId
        nameField.text = name
        goalField.value = goal
        priorityBox.checked = priority
        formError = ""
        showTaskPanel = true
    }

    function submitTask() {
        var message = taskLedger.validateTask(nameField.text, goalField.value, editingTaskId)
        if (message !== "") {
            formError = message
            return
        }
        var ok = editingTaskId === ""
            ? taskLedger.addTask(nameField.text, goalField.value, priorityBox.checked) !== ""
            : taskLedger.updateTask(editingTaskId, nameField.text, goalField.value, priorityBox.checked)
        if (ok) {
            openEditor("", "", 30, false)
        }
    }

    Connections {
        target: taskLedger
        function onErrorOccurred(message) { root.formError = message }
    }

    Connections {
        target: pieChart
        function onCenterActivated() { root.showTaskPanel = !root.showTaskPanel }
    }

    Connections {
        target: session
        function onNotificationRequested(title, message) { root.statusMessage = title + " " + message }
    }

    RowLayout {
        anchors.fill: parent
        anchors.margins: 16
        spacing: 16

        ColumnLayout {
            Layout.fillWidth: true
            Layout.fillHeight: true
            spacing: 12

            RowLayout {
                Layout.fillWidth: true
                Label {
                    text: "FocusPie"
                    font.pixelSize: 22
                    color: "#f5f6f8"
                }
                Item { Layout.fillWidth: true }
                Label {
                    text: displayClock.currentTime
                    font.pixelSize: 18
                    color: "#9aa3b2"
                }
            }

            Canvas {
                id: chartCanvas
                Layout.fillWidth: true
                Layout.fillHeight: true

                onWidthChanged: pieChart.setSize(width, height)
                onHeightChanged: pieChart.setSize(width, height)

                Connections {
                    target: pieChart
                    function onSlicesChanged() { chartCanvas.requestPaint() }
                    function onGeometryChanged() { chartCanvas.requestPaint() }
                }

                onPaint: {
                    var ctx = getContext("2d")
                    ctx.reset()
                    var cx = pieChart.centerX
                    var cy = pieChart.centerY
                    var outer = pieChart.outerRadius
                    var inner = pieChart.innerRadius
                    var slices = pieChart.slices
                    for (var i = 0; i < slices.length; ++i) {
                        var s = slices[i]
                        var x = cx + s.offsetX
                        var y = cy + s.offsetY
                        ctx.beginPath()
                        ctx.moveTo(x, y)
                        ctx.arc(x, y, outer, s.startAngle, s.startAngle + s.sweep, false)
                        ctx.closePath()
                        ctx.globalAlpha = s.index < 0 ? 1.0 : 0.35
                        ctx.fillStyle = s.color
                        ctx.fill()
                        if (s.progressSweep > 0) {
                            ctx.beginPath()
                            ctx.moveTo(x, y)
                            ctx.arc(x, y, outer, s.startAngle, s.startAngle + s.progressSweep, false)
                            ctx.closePath()
                            ctx.globalAlpha = 1.0
                            ctx.fill()
                        }
                    }
                    ctx.globalAlpha = 1.0
                    ctx.beginPath()
                    ctx.arc(cx, cy, inner, 0, Math.PI * 2, false)
                    ctx.fillStyle = pieChart.centerHovered ? "#232a35" : "#1b2028"
                    ctx.fill()
                }

                Column {
                    anchors.centerIn: parent
                    spacing: 4
                    Label {
                        anchors.horizontalCenter: parent.horizontalCenter
                        text: pieChart.centerTitle
                        color: "#f5f6f8"
                        font.pixelSize: 18
                    }
                    Label {
                        anchors.horizontalCenter: parent.horizontalCenter
                        text: pieChart.centerDetail
                        color: "#9aa3b2"
                    }
                }

                MouseArea {
                    anchors.fill: parent
                    hoverEnabled: true
                    onPositionChanged: function(mouse) { pieChart.hoverAt(mouse.x, mouse.y) }
                    onExited: pieChart.clearHover()
                    onClicked: function(mouse) { pieChart.clickAt(mouse.x, mouse.y) }
                }
            }

            Label {
                Layout.fillWidth: true
                visible: root.statusMessage !== ""
                text: root.statusMessage
                color: "#22c55e"
                horizontalAlignment: Text.AlignHCenter
            }
        }

        ColumnLayout {
            Layout.preferredWidth: 300
            Layout.fillHeight: true
            spacing: 12

            Canvas {
                id: ringCanvas
                Layout.preferredWidth: 220
                Layout.preferredHeight: 220
                Layout.alignment: Qt.AlignHCenter

                Connections {
                    target: session
                    function onRingsChanged() { ringCanvas.requestPaint() }
                }

                onPaint: {
                    var ctx = getContext("2d")
                    ctx.reset()
                    var c = width / 2
                    var start = -Math.PI / 2
                    ctx.lineWidth = 12
                    ctx.strokeStyle = "#ef4444"
                    ctx.beginPath()
                    ctx.arc(c, c, c - 10, start, start + Math.PI * 2 * session.outerRingFraction, false)
                    ctx.stroke()
                    ctx.strokeStyle = root.ringColor(session.innerRingColorKind)
                    ctx.beginPath()
                    ctx.arc(c, c, c - 28, start, start + Math.PI * 2 * session.innerRingFraction, false)
                    ctx.stroke()
                }

                Column {
                    anchors.centerIn: parent
                    Label {
                        anchors.horizontalCenter: parent.horizontalCenter
                        text: pomodoroTimer.timeDisplay
                        color: "#f5f6f8"
                        font.pixelSize: 32
                    }
                    Label {
                        anchors.horizontalCenter: parent.horizontalCenter
                        visible: taskLedger.currentTaskId !== ""
                        text: pomodoroTimer.taskTimeDisplay + " left"
                        color: "#9aa3b2"
                    }
                }
            }

            RowLayout {
                Layout.alignment: Qt.AlignHCenter
                Button {
                    text: "Start"
                    enabled: pomodoroTimer.mode === "idle"
                    onClicked: pomodoroTimer.startWork()
                }
                Button {
                    text: pomodoroTimer.isRunning ? "Pause" : "Resume"
                    enabled: pomodoroTimer.mode !== "idle"
                    onClicked: pomodoroTimer.pauseTimer()
                }
                Button {
                    text: "Skip break"
                    visible: pomodoroTimer.mode === "shortBreak" || pomodoroTimer.mode === "longBreak"
                    onClicked: pomodoroTimer.skipBreak()
                }
            }

            CheckBox {
                text: "Pause when the window loses focus"
                checked: pomodoroTimer.autoPauseEnabled
                onClicked: pomodoroTimer.toggleAutoPause()
            }

            ColumnLayout {
                Layout.fillWidth: true
                visible: root.showTaskPanel
                spacing: 8

                TextField {
                    id: nameField
                    Layout.fillWidth: true
                    placeholderText: "Task name"
                }
                SpinBox {
                    id: goalField
                    from: 1
                    to: taskLedger.workdayMinutes
                    value: 30
                    editable: true
                }
                CheckBox {
                    id: priorityBox
                    text: "Priority"
                }
                Label {
                    Layout.fillWidth: true
                    visible: root.formError !== ""
                    text: root.formError
                    color: "#f87171"
                    wrapMode: Text.WordWrap
                }
                RowLayout {
                    Button {
                        text: root.editingTaskId === "" ? "Add task" : "Save"
                        onClicked: root.submitTask()
                    }
                    Button {
                        text: "Reset progress"
                        onClicked: session.resetProgress()
                    }
                }
            }

            ListView {
                Layout.fillWidth: true
                Layout.fillHeight: true
                clip: true
                model: taskLedger
                delegate: Rectangle {
                    width: ListView.view.width
                    height: 36
                    color: isCurrent ? "#232a35" : "transparent"
                    radius: 6

                    RowLayout {
                        anchors.fill: parent
                        anchors.margins: 6
                        Rectangle {
                            width: 12
                            height: 12
                            radius: 6
                            color: model.color
                        }
                        Label {
                            Layout.fillWidth: true
                            text: (isPriority ? "* " : "") + name
                            color: goalAchieved ? "#22c55e" : "#f5f6f8"
                            elide: Text.ElideRight
                        }
                        Label {
                            text: progressMinutes + "/" + goalTimeMinutes + "m"
                            color: "#9aa3b2"
                        }
                        ToolButton {
                            text: "Edit"
                            onClicked: root.openEditor(taskId, name, goalTimeMinutes, isPriority)
                        }
                        ToolButton {
                            text: "Delete"
                            onClicked: taskLedger.deleteTask(taskId)
                        }
                    }

                    MouseArea {
                        anchors.fill: parent
                        z: -1
                        onClicked: taskLedger.selectTask(taskId)
                    }
                }
            }
        }
    }

    Component.onCompleted: pieChart.setSize(chartCanvas.width, chartCanvas.height)
}
"""

__all__ = ["FOCUSPIE_QML"]
